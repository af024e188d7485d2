"""
Network step - Virtual Network and Subnets.

The virtual network is created first; its subnets are independent of each
other and are created concurrently. The step completes only when every
subnet call has finished, and fails if any of them failed.
"""

import logging

from ....constants import STEP_NETWORK
from ....core.pipeline import StepContext, fan_out, step_errors

logger = logging.getLogger(__name__)


def vnet_parameters(location: str, address_space: str) -> dict:
    return {
        "location": location,
        "address_space": {"address_prefixes": [address_space]},
    }


async def _create_subnet(ctx: StepContext, subnet) -> str:
    config = ctx.config
    network = config.network

    with step_errors(STEP_NETWORK, "subnet", subnet.name, {
        "vnet": network.vnet_name,
        "address_prefix": subnet.address_prefix,
    }):
        await ctx.executor.run(
            lambda: ctx.clients.network.create_subnet(
                config.resource_group_name,
                network.vnet_name,
                subnet.name,
                {"address_prefix": subnet.address_prefix},
            ),
            f"Create Subnet {subnet.name}",
        )

    ctx.reporter.resource_created("subnet", subnet.name)
    return subnet.name


async def create_virtual_network(ctx: StepContext) -> dict:
    """
    Create the Virtual Network, then both subnets concurrently.

    Args:
        ctx: Step context with resolved config and Resource Clients

    Returns:
        {"vnet": name, "subnets": [subnet names]}

    Raises:
        StepExhaustionError: If the vnet or any subnet failed on every
            attempt. With a failed subnet, the other subnet call is still
            awaited first.
    """
    config = ctx.config
    network = config.network

    logger.info(f"Creating virtual network: {network.vnet_name}")

    with step_errors(STEP_NETWORK, "virtual network", network.vnet_name, {
        "address_space": network.address_space,
        "location": config.location,
    }):
        await ctx.executor.run(
            lambda: ctx.clients.network.create_virtual_network(
                config.resource_group_name,
                network.vnet_name,
                vnet_parameters(config.location, network.address_space),
            ),
            "Create Virtual Network",
        )
    ctx.reporter.resource_created("virtual_network", network.vnet_name)

    logger.info("Creating subnets...")
    subnets = await fan_out(*(_create_subnet(ctx, subnet) for subnet in network.subnets))
    logger.info("✓ Subnets created successfully.")

    return {"vnet": network.vnet_name, "subnets": subnets}
