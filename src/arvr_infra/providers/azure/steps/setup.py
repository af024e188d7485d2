"""
Setup step - Resource Group.

The Resource Group is the container for every other resource and must
exist before any of them is created. Deleting it removes everything that
was deployed into it (used only by the explicit `destroy` command).
"""

import logging

from ....constants import STEP_DESTROY, STEP_RESOURCE_GROUP
from ....core.pipeline import StepContext, step_errors

logger = logging.getLogger(__name__)


async def create_resource_group(ctx: StepContext) -> dict:
    """
    Create the Resource Group that holds every other resource.

    Args:
        ctx: Step context with resolved config and Resource Clients

    Returns:
        {"resource_group": name}

    Raises:
        StepExhaustionError: If creation failed on every attempt
    """
    config = ctx.config
    rg_name = config.resource_group_name

    logger.info(f"Creating Resource Group: {rg_name} in {config.location}")

    with step_errors(STEP_RESOURCE_GROUP, "resource group", rg_name, {"location": config.location}):
        await ctx.executor.run(
            lambda: ctx.clients.resource_groups.create_or_update(rg_name, {"location": config.location}),
            "Create Resource Group",
        )

    ctx.reporter.resource_created("resource_group", rg_name)
    return {"resource_group": rg_name}


async def destroy_resource_group(ctx: StepContext) -> dict:
    """
    Delete the Resource Group and ALL resources within it.

    Warning:
        This is a destructive operation; nothing in the group survives.
    """
    rg_name = ctx.config.resource_group_name

    logger.info(f"Deleting Resource Group: {rg_name}")

    with step_errors(STEP_DESTROY, "resource group", rg_name, action="delete"):
        await ctx.executor.run(
            lambda: ctx.clients.resource_groups.delete(rg_name),
            "Delete Resource Group",
        )

    logger.info(f"✓ Resource Group deleted: {rg_name}")
    return {"resource_group": rg_name}
