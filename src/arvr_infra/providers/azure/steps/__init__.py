"""
Azure provisioning steps.

Declares the fixed topology as pipeline steps and their dependencies:

    resource_group → network → {cluster, database} → storage → cdn

Cluster and database only need the network; whether they run together is
decided by the pipeline mode, not here.
"""

from typing import List

from ....constants import (
    STEP_CDN,
    STEP_CLUSTER,
    STEP_DATABASE,
    STEP_NETWORK,
    STEP_RESOURCE_GROUP,
    STEP_STORAGE,
)
from ....core.pipeline import Step
from .cdn import STORAGE_STEP_KEY, create_cdn
from .compute import create_aks_cluster
from .database import create_postgresql_server
from .network import create_virtual_network
from .setup import create_resource_group, destroy_resource_group
from .storage import create_storage_account


def build_steps() -> List[Step]:
    return [
        Step("resource_group", STEP_RESOURCE_GROUP, create_resource_group),
        Step("network", STEP_NETWORK, create_virtual_network, depends_on=("resource_group",)),
        Step("cluster", STEP_CLUSTER, create_aks_cluster, depends_on=("network",)),
        Step("database", STEP_DATABASE, create_postgresql_server, depends_on=("network",)),
        Step(STORAGE_STEP_KEY, STEP_STORAGE, create_storage_account, depends_on=("cluster", "database")),
        Step("cdn", STEP_CDN, create_cdn, depends_on=(STORAGE_STEP_KEY,)),
    ]


__all__ = ["build_steps", "destroy_resource_group"]
