"""
Database step - PostgreSQL flexible server.

The administrator password is only placed in the request body. It never
appears in step errors, events or log lines.
"""

import logging

from ....constants import STEP_DATABASE
from ....core.config import DatabaseSpec
from ....core.pipeline import StepContext, step_errors

logger = logging.getLogger(__name__)


def server_parameters(location: str, database: DatabaseSpec) -> dict:
    return {
        "location": location,
        "sku": {"name": database.sku_name, "tier": database.sku_tier},
        "administrator_login": database.admin_username,
        "administrator_login_password": database.admin_password.get_secret_value(),
        "version": database.version,
        "storage": {"storage_size_gb": database.storage_size_gb},
    }


async def create_postgresql_server(ctx: StepContext) -> dict:
    """
    Create the PostgreSQL flexible server.

    Args:
        ctx: Step context with resolved config and Resource Clients

    Returns:
        {"server": name}

    Raises:
        StepExhaustionError: If creation failed on every attempt. The
            error carries version, tier and admin login, never the password.
    """
    config = ctx.config
    database = config.database

    logger.info(f"Creating PostgreSQL server: {database.server_name}")

    with step_errors(STEP_DATABASE, "PostgreSQL server", database.server_name, {
        "version": database.version,
        "tier": database.sku_tier,
        "admin": database.admin_username,
    }):
        await ctx.executor.run(
            lambda: ctx.clients.database.create_or_update(
                config.resource_group_name,
                database.server_name,
                server_parameters(config.location, database),
            ),
            "Create PostgreSQL Server",
        )

    ctx.reporter.resource_created("postgresql_server", database.server_name)
    return {"server": database.server_name}
