"""
AR/VR E-commerce Infrastructure Deployer - CLI Entry Point.

This module is the only place that turns deployment outcomes into a
process exit status. Everything below it raises; nothing below it exits.

Commands:
    deploy   - Provision the full topology in dependency order
    plan     - Show execution batches and resource names (no Azure calls)
    destroy  - Delete the resource group and everything in it

Usage:
    arvr-infra deploy
    arvr-infra --debug deploy --parallel-compute
    arvr-infra destroy --yes
"""

import argparse
import asyncio
import dataclasses
import sys
from typing import List, Optional

from . import constants as CONSTANTS
from .core.config import DeploymentConfig, resolve_config
from .core.exceptions import DeploymentError, StepExhaustionError, ValidationError
from .core.graph import DependencyGraph
from .core.pipeline import DeploymentPipeline, StepContext, execution_batches
from .core.reporter import Reporter
from .core.retry import RetryExecutor, RetryPolicy
from .logger import configure_logger, logger, print_stack_trace, register_secret
from .providers.azure import AzureProvider
from .providers.azure.provider import FATAL_ERRORS
from .providers.azure.steps import build_steps, destroy_resource_group

BANNER = "AR/VR E-commerce Infrastructure Deployment"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="arvr-infra", description=BANNER)
    parser.add_argument("--debug", action="store_true", help="Enable debug logging and stack traces.")

    subparsers = parser.add_subparsers(dest="command", required=True)

    deploy = subparsers.add_parser("deploy", help="Provision all resources.")
    deploy.add_argument(
        "--parallel-compute",
        action="store_true",
        help="Create the AKS cluster and the PostgreSQL server concurrently.",
    )

    plan = subparsers.add_parser("plan", help="Show the execution order without calling Azure.")
    plan.add_argument(
        "--parallel-compute",
        action="store_true",
        help="Show the order used with --parallel-compute.",
    )

    destroy = subparsers.add_parser("destroy", help="Delete the resource group and all its resources.")
    destroy.add_argument("--yes", action="store_true", help="Do not ask for confirmation.")

    return parser


def _executor(config: DeploymentConfig, reporter: Reporter) -> RetryExecutor:
    policy = RetryPolicy.from_settings(config.retry, fatal_errors=FATAL_ERRORS)
    return RetryExecutor(policy, reporter)


async def deploy(config: DeploymentConfig, reporter: Optional[Reporter] = None):
    reporter = reporter or Reporter()
    async with AzureProvider(config) as provider:
        pipeline = DeploymentPipeline(
            build_steps(),
            config,
            provider.resource_clients(),
            _executor(config, reporter),
            reporter,
            concurrent=config.parallel_compute,
        )
        return await pipeline.deploy()


async def destroy(config: DeploymentConfig, reporter: Optional[Reporter] = None) -> None:
    reporter = reporter or Reporter()
    async with AzureProvider(config) as provider:
        clients = provider.resource_clients()
        ctx = StepContext(config, clients, _executor(config, reporter), reporter)
        await destroy_resource_group(ctx)


def show_plan(config: DeploymentConfig) -> None:
    batches = execution_batches(DependencyGraph(build_steps()), config.parallel_compute)

    print(f"Subscription:   {config.subscription_id}")
    print(f"Resource group: {config.resource_group_name} ({config.location})")
    print(f"Retry policy:   {config.retry.max_attempts} attempts, {config.retry.delay_seconds}s delay")
    print("\nDeployment steps:")
    index = 1
    for batch in batches:
        together = " (concurrent)" if len(batch) > 1 else ""
        for step in batch:
            print(f"{index}. {step.name}{together}")
            index += 1


def _confirm(config: DeploymentConfig) -> bool:
    try:
        answer = input(
            f"Delete resource group '{config.resource_group_name}' and ALL resources in it? [y/N] "
        )
    except EOFError:
        return False
    return answer.strip().lower() in ("y", "yes")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logger(debug_mode=args.debug)

    print(BANNER)
    print("=" * len(BANNER))

    try:
        config = resolve_config()
        register_secret(config.database.admin_password.get_secret_value())
        if config.service_principal:
            register_secret(config.service_principal.client_secret.get_secret_value())
        if config.debug and not args.debug:
            configure_logger(debug_mode=True)

        if getattr(args, "parallel_compute", False):
            config = dataclasses.replace(config, parallel_compute=True)

        if args.command == "plan":
            show_plan(config)
        elif args.command == "destroy":
            if not args.yes and not _confirm(config):
                logger.info("Aborted; nothing was deleted.")
                return CONSTANTS.EXIT_SUCCESS
            asyncio.run(destroy(config))
            logger.info("Infrastructure teardown completed successfully.")
        else:
            logger.info("Starting infrastructure deployment...")
            asyncio.run(deploy(config))
            logger.info("Infrastructure deployment completed successfully! 🎉")
    except ValidationError as e:
        logger.error(f"❌ Validation failed: {e}")
        print_stack_trace()
        return CONSTANTS.EXIT_FAILURE
    except StepExhaustionError as e:
        logger.error(f"❌ Deployment failed at step '{e.step_name}': {e}")
        logger.error(f"Caused by: {type(e.cause).__name__}: {e.cause}")
        print_stack_trace()
        return CONSTANTS.EXIT_FAILURE
    except DeploymentError as e:
        logger.error(f"❌ Deployment failed: {e}")
        print_stack_trace()
        return CONSTANTS.EXIT_FAILURE
    except KeyboardInterrupt:
        logger.warning("Interrupted; resources created so far remain in place.")
        return CONSTANTS.EXIT_INTERRUPTED
    except Exception as e:
        logger.error(f"❌ Unexpected error: {type(e).__name__}: {e}")
        print_stack_trace()
        return CONSTANTS.EXIT_FAILURE

    return CONSTANTS.EXIT_SUCCESS


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
