"""Compute step - AKS managed cluster."""

import logging

from ....constants import STEP_CLUSTER
from ....core.config import ClusterSpec
from ....core.pipeline import StepContext, step_errors

logger = logging.getLogger(__name__)


def cluster_parameters(location: str, cluster: ClusterSpec) -> dict:
    pool = cluster.node_pool
    return {
        "location": location,
        "dns_prefix": cluster.dns_prefix,
        "agent_pool_profiles": [
            {
                "name": pool.name,
                "count": pool.count,
                "vm_size": pool.vm_size,
                "mode": pool.mode,
                "os_type": pool.os_type,
            }
        ],
        "identity": {"type": cluster.identity_type},
    }


async def create_aks_cluster(ctx: StepContext) -> dict:
    """
    Create the AKS cluster with its single system node pool.

    Args:
        ctx: Step context with resolved config and Resource Clients

    Returns:
        {"cluster": name}

    Raises:
        StepExhaustionError: If creation failed on every attempt
    """
    config = ctx.config
    cluster = config.cluster

    logger.info(f"Creating AKS cluster: {cluster.name}")

    with step_errors(STEP_CLUSTER, "AKS cluster", cluster.name, {
        "node_count": cluster.node_pool.count,
        "vm_size": cluster.node_pool.vm_size,
    }):
        await ctx.executor.run(
            lambda: ctx.clients.cluster.create_or_update(
                config.resource_group_name,
                cluster.name,
                cluster_parameters(config.location, cluster),
            ),
            "Create AKS Cluster",
        )

    ctx.reporter.resource_created("aks_cluster", cluster.name)
    return {"cluster": cluster.name}
