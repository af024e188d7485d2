"""
Protocol definitions for the Resource Client boundary.

The deployment engine never talks to a cloud SDK directly. Each resource
domain is exposed through one narrow, asynchronous capability interface so
that tests (or another provider) can substitute a fake per domain without
mocking one monolithic client.

Every method issues one create/update call and returns only after the
remote long-running operation has completed.

Design Pattern: Strategy + Dependency Injection
    - One Protocol per domain (network, cluster, database, storage, CDN)
    - ResourceClients bundles the handles and is passed into every step
"""

from dataclasses import dataclass
from typing import Any, Dict, Protocol, runtime_checkable


@runtime_checkable
class SubscriptionClient(Protocol):
    """Resolves the target subscription (connectivity pre-check)."""

    async def get_subscription(self, subscription_id: str) -> Any:
        ...


@runtime_checkable
class ResourceGroupClient(Protocol):
    """Resource group create/update and teardown."""

    async def create_or_update(self, name: str, parameters: Dict[str, Any]) -> Any:
        ...

    async def delete(self, name: str) -> None:
        ...


@runtime_checkable
class NetworkClient(Protocol):
    """Virtual network and subnet creation."""

    async def create_virtual_network(
        self, resource_group: str, name: str, parameters: Dict[str, Any]
    ) -> Any:
        ...

    async def create_subnet(
        self, resource_group: str, vnet_name: str, name: str, parameters: Dict[str, Any]
    ) -> Any:
        ...


@runtime_checkable
class ClusterClient(Protocol):
    """Managed compute cluster creation."""

    async def create_or_update(
        self, resource_group: str, name: str, parameters: Dict[str, Any]
    ) -> Any:
        ...


@runtime_checkable
class DatabaseClient(Protocol):
    """Managed database server creation."""

    async def create_or_update(
        self, resource_group: str, name: str, parameters: Dict[str, Any]
    ) -> Any:
        ...


@runtime_checkable
class StorageClient(Protocol):
    """Storage account and blob container creation."""

    async def create_account(
        self, resource_group: str, name: str, parameters: Dict[str, Any]
    ) -> Any:
        ...

    async def create_container(
        self, resource_group: str, account_name: str, name: str, parameters: Dict[str, Any]
    ) -> Any:
        ...


@runtime_checkable
class CdnClient(Protocol):
    """CDN profile and endpoint creation."""

    async def create_profile(
        self, resource_group: str, name: str, parameters: Dict[str, Any]
    ) -> Any:
        ...

    async def create_endpoint(
        self, resource_group: str, profile_name: str, name: str, parameters: Dict[str, Any]
    ) -> Any:
        ...


@dataclass(frozen=True)
class ResourceClients:
    """One already-authenticated handle per resource domain."""

    subscription: SubscriptionClient
    resource_groups: ResourceGroupClient
    network: NetworkClient
    cluster: ClusterClient
    database: DatabaseClient
    storage: StorageClient
    cdn: CdnClient
