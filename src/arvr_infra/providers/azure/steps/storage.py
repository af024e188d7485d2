"""
Storage step - Storage Account and asset container.

The container is created only after the account exists. The account's
generated blob hostname is published for the CDN step.
"""

import logging
from typing import Any
from urllib.parse import urlparse

from ....constants import BLOB_HOST_SUFFIX, STEP_STORAGE
from ....core.config import StorageSpec
from ....core.pipeline import StepContext, step_errors

logger = logging.getLogger(__name__)


def account_parameters(location: str, storage: StorageSpec) -> dict:
    return {
        "location": location,
        "sku": {"name": storage.sku},
        "kind": storage.kind,
        "enable_https_traffic_only": True,
    }


def blob_hostname(account: Any, account_name: str) -> str:
    """
    Hostname of the account's blob endpoint.

    Falls back to the public-cloud naming scheme when the SDK response
    carries no endpoints.
    """
    endpoints = getattr(account, "primary_endpoints", None)
    blob_url = getattr(endpoints, "blob", None)
    if isinstance(blob_url, str) and blob_url:
        host = urlparse(blob_url).hostname
        if host:
            return host
    return f"{account_name}.{BLOB_HOST_SUFFIX}"


async def create_storage_account(ctx: StepContext) -> dict:
    """
    Create the Storage Account, then its private asset container.

    Args:
        ctx: Step context with resolved config and Resource Clients

    Returns:
        {"account": name, "container": name, "blob_host": hostname}

    Raises:
        StepExhaustionError: If the account or the container failed on
            every attempt (no container call is made without an account)
    """
    config = ctx.config
    storage = config.storage

    logger.info(f"Creating storage account: {storage.account_name}")

    with step_errors(STEP_STORAGE, "storage account", storage.account_name, {
        "sku": storage.sku,
        "kind": storage.kind,
    }):
        account = await ctx.executor.run(
            lambda: ctx.clients.storage.create_account(
                config.resource_group_name,
                storage.account_name,
                account_parameters(config.location, storage),
            ),
            "Create Storage Account",
        )
    ctx.reporter.resource_created("storage_account", storage.account_name)

    with step_errors(STEP_STORAGE, "storage container", storage.container_name, {
        "account": storage.account_name,
    }):
        await ctx.executor.run(
            lambda: ctx.clients.storage.create_container(
                config.resource_group_name,
                storage.account_name,
                storage.container_name,
                {"public_access": storage.container_access},
            ),
            "Create Storage Container",
        )
    ctx.reporter.resource_created("storage_container", storage.container_name)

    return {
        "account": storage.account_name,
        "container": storage.container_name,
        "blob_host": blob_hostname(account, storage.account_name),
    }
