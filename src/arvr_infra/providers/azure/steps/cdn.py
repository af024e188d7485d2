"""
CDN step - CDN profile and endpoint.

The endpoint references both the profile and the storage account's blob
hostname, so the profile is created first and the storage step must have
completed before this step starts.
"""

import logging

from ....constants import STEP_CDN
from ....core.pipeline import StepContext, step_errors

logger = logging.getLogger(__name__)

STORAGE_STEP_KEY = "storage"


def endpoint_parameters(location: str, origin_name: str, origin_host: str) -> dict:
    return {
        "location": location,
        "origins": [{"name": origin_name, "host_name": origin_host}],
        "origin_host_header": origin_host,
        "is_http_allowed": False,
        "is_https_allowed": True,
    }


async def create_cdn(ctx: StepContext) -> dict:
    """
    Create the CDN profile, then the endpoint in front of blob storage.

    Args:
        ctx: Step context; must hold the storage step's "blob_host" output

    Returns:
        {"profile": name, "endpoint": name, "origin": blob hostname}

    Raises:
        KeyError: If the storage step has not published its hostname
        StepExhaustionError: If the profile or endpoint failed on every attempt
    """
    config = ctx.config
    cdn = config.cdn
    origin_host = ctx.output_of(STORAGE_STEP_KEY, "blob_host")

    logger.info(f"Creating CDN profile: {cdn.profile_name}")

    with step_errors(STEP_CDN, "CDN profile", cdn.profile_name, {"sku": cdn.sku}):
        await ctx.executor.run(
            lambda: ctx.clients.cdn.create_profile(
                config.resource_group_name,
                cdn.profile_name,
                {"location": config.location, "sku": {"name": cdn.sku}},
            ),
            "Create CDN Profile",
        )
    ctx.reporter.resource_created("cdn_profile", cdn.profile_name)

    with step_errors(STEP_CDN, "CDN endpoint", cdn.endpoint_name, {
        "profile": cdn.profile_name,
        "origin": origin_host,
    }):
        await ctx.executor.run(
            lambda: ctx.clients.cdn.create_endpoint(
                config.resource_group_name,
                cdn.profile_name,
                cdn.endpoint_name,
                endpoint_parameters(config.location, cdn.origin_name, origin_host),
            ),
            "Create CDN Endpoint",
        )
    ctx.reporter.resource_created("cdn_endpoint", cdn.endpoint_name)

    return {"profile": cdn.profile_name, "endpoint": cdn.endpoint_name, "origin": origin_host}
