"""
Azure provider: credential and client lifetime.

This module builds the asynchronous Azure SDK clients for one deployment,
wraps them in the Resource Client adapters and closes everything when the
deployment ends.

SDK Clients Initialized:
    - SubscriptionClient: Connectivity check
    - ResourceManagementClient: Resource Group management
    - NetworkManagementClient: Virtual Network and Subnets
    - ContainerServiceClient: AKS cluster
    - PostgreSQLManagementClient: PostgreSQL flexible server
    - StorageManagementClient: Storage Account and blob container
    - CdnManagementClient: CDN profile and endpoint

Usage:
    async with AzureProvider(config) as provider:
        clients = provider.resource_clients()
"""

import logging
from contextlib import AsyncExitStack
from typing import Any, Dict, Optional, Tuple, Type

from azure.core.exceptions import ClientAuthenticationError

from ...core.config import DeploymentConfig
from ...core.protocols import ResourceClients
from .clients import (
    AzureCdnClient,
    AzureClusterClient,
    AzureDatabaseClient,
    AzureNetworkClient,
    AzureResourceGroupClient,
    AzureStorageClient,
    AzureSubscriptionClient,
)

logger = logging.getLogger(__name__)

# A rejected credential will be rejected again; do not burn retries on it.
FATAL_ERRORS: Tuple[Type[BaseException], ...] = (ClientAuthenticationError,)


class AzureProvider:
    """
    Owns the Azure credential and SDK clients for one deployment.

    Attributes:
        name: Provider identifier ("azure")
        clients: Dictionary of initialized Azure SDK clients
    """

    name: str = "azure"

    def __init__(self, config: DeploymentConfig):
        self._config = config
        self._credential: Optional[Any] = None
        self._clients: Dict[str, Any] = {}
        self._stack: Optional[AsyncExitStack] = None

    @property
    def clients(self) -> Dict[str, Any]:
        if not self._clients:
            raise RuntimeError("Provider not initialized. Use 'async with AzureProvider(...)'.")
        return self._clients

    def _get_credential(self) -> Any:
        """Get Azure credential for SDK clients."""
        from azure.identity.aio import ClientSecretCredential, DefaultAzureCredential

        principal = self._config.service_principal
        if principal:
            logger.debug(f"Using service principal {principal.client_id}")
            return ClientSecretCredential(
                tenant_id=principal.tenant_id,
                client_id=principal.client_id,
                client_secret=principal.client_secret.get_secret_value()
            )
        return DefaultAzureCredential()

    def _create_sdk_clients(self, credential: Any) -> Dict[str, Any]:
        from azure.mgmt.cdn.aio import CdnManagementClient
        from azure.mgmt.containerservice.aio import ContainerServiceClient
        from azure.mgmt.network.aio import NetworkManagementClient
        from azure.mgmt.rdbms.postgresql_flexibleservers.aio import PostgreSQLManagementClient
        from azure.mgmt.resource.resources.aio import ResourceManagementClient
        from azure.mgmt.resource.subscriptions.aio import SubscriptionClient
        from azure.mgmt.storage.aio import StorageManagementClient

        subscription_id = self._config.subscription_id

        return {
            "subscription": SubscriptionClient(credential=credential),
            "resource": ResourceManagementClient(credential=credential, subscription_id=subscription_id),
            "network": NetworkManagementClient(credential=credential, subscription_id=subscription_id),
            "aks": ContainerServiceClient(credential=credential, subscription_id=subscription_id),
            "postgres": PostgreSQLManagementClient(credential=credential, subscription_id=subscription_id),
            "storage": StorageManagementClient(credential=credential, subscription_id=subscription_id),
            "cdn": CdnManagementClient(credential=credential, subscription_id=subscription_id),
        }

    async def __aenter__(self) -> "AzureProvider":
        self._stack = AsyncExitStack()
        try:
            self._credential = await self._stack.enter_async_context(self._get_credential())
            for key, client in self._create_sdk_clients(self._credential).items():
                self._clients[key] = await self._stack.enter_async_context(client)
        except BaseException:
            await self._stack.aclose()
            raise
        logger.debug(f"Initialized Azure clients: {sorted(self._clients)}")
        return self

    async def __aexit__(self, *exc_info) -> None:
        if self._stack is not None:
            await self._stack.aclose()
        self._stack = None
        self._clients = {}
        self._credential = None

    def resource_clients(self) -> ResourceClients:
        clients = self.clients
        return ResourceClients(
            subscription=AzureSubscriptionClient(clients["subscription"]),
            resource_groups=AzureResourceGroupClient(clients["resource"]),
            network=AzureNetworkClient(clients["network"]),
            cluster=AzureClusterClient(clients["aks"]),
            database=AzureDatabaseClient(clients["postgres"]),
            storage=AzureStorageClient(clients["storage"]),
            cdn=AzureCdnClient(clients["cdn"]),
        )
