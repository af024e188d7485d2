"""
Azure SDK adapters for the Resource Client protocols.

Each adapter wraps one asynchronous Azure management client and exposes the
narrow create/update surface the pipeline depends on. Long-running
operations are started with `begin_*` and awaited to completion, so a call
returns only when Azure reports the resource as provisioned.

Adapters:
    - AzureSubscriptionClient: SubscriptionClient (connectivity check)
    - AzureResourceGroupClient: ResourceManagementClient
    - AzureNetworkClient: NetworkManagementClient
    - AzureClusterClient: ContainerServiceClient
    - AzureDatabaseClient: PostgreSQLManagementClient (flexible servers)
    - AzureStorageClient: StorageManagementClient
    - AzureCdnClient: CdnManagementClient
"""

import logging
from typing import Any, Dict

logger = logging.getLogger(__name__)


class AzureSubscriptionClient:
    def __init__(self, client: Any):
        self._client = client

    async def get_subscription(self, subscription_id: str) -> Any:
        subscription = await self._client.subscriptions.get(subscription_id)
        logger.info(f"✓ Connected to subscription: {getattr(subscription, 'display_name', subscription_id)}")
        return subscription


class AzureResourceGroupClient:
    def __init__(self, client: Any):
        self._client = client

    async def create_or_update(self, name: str, parameters: Dict[str, Any]) -> Any:
        # Resource Groups are idempotent - create_or_update handles existing RGs
        return await self._client.resource_groups.create_or_update(
            resource_group_name=name,
            parameters=parameters
        )

    async def delete(self, name: str) -> None:
        poller = await self._client.resource_groups.begin_delete(name)
        await poller.result()


class AzureNetworkClient:
    def __init__(self, client: Any):
        self._client = client

    async def create_virtual_network(self, resource_group: str, name: str, parameters: Dict[str, Any]) -> Any:
        poller = await self._client.virtual_networks.begin_create_or_update(
            resource_group, name, parameters
        )
        return await poller.result()

    async def create_subnet(
        self, resource_group: str, vnet_name: str, name: str, parameters: Dict[str, Any]
    ) -> Any:
        poller = await self._client.subnets.begin_create_or_update(
            resource_group, vnet_name, name, parameters
        )
        return await poller.result()


class AzureClusterClient:
    def __init__(self, client: Any):
        self._client = client

    async def create_or_update(self, resource_group: str, name: str, parameters: Dict[str, Any]) -> Any:
        poller = await self._client.managed_clusters.begin_create_or_update(
            resource_group, name, parameters
        )
        return await poller.result()


class AzureDatabaseClient:
    def __init__(self, client: Any):
        self._client = client

    async def create_or_update(self, resource_group: str, name: str, parameters: Dict[str, Any]) -> Any:
        poller = await self._client.servers.begin_create(resource_group, name, parameters)
        return await poller.result()


class AzureStorageClient:
    def __init__(self, client: Any):
        self._client = client

    async def create_account(self, resource_group: str, name: str, parameters: Dict[str, Any]) -> Any:
        poller = await self._client.storage_accounts.begin_create(resource_group, name, parameters)
        return await poller.result()

    async def create_container(
        self, resource_group: str, account_name: str, name: str, parameters: Dict[str, Any]
    ) -> Any:
        # Container creation is synchronous on the management plane
        return await self._client.blob_containers.create(
            resource_group, account_name, name, parameters
        )


class AzureCdnClient:
    def __init__(self, client: Any):
        self._client = client

    async def create_profile(self, resource_group: str, name: str, parameters: Dict[str, Any]) -> Any:
        poller = await self._client.profiles.begin_create(resource_group, name, parameters)
        return await poller.result()

    async def create_endpoint(
        self, resource_group: str, profile_name: str, name: str, parameters: Dict[str, Any]
    ) -> Any:
        poller = await self._client.endpoints.begin_create(
            resource_group, profile_name, name, parameters
        )
        return await poller.result()
