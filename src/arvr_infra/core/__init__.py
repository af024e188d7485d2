"""
Core deployment engine.

This package holds the provider-neutral parts of the deployer: the retry
executor, the dependency-aware pipeline, configuration resolution, the
error taxonomy and the narrow Resource Client interfaces.

Modules:
    protocols: One capability interface per resource domain
    config: Environment-driven, immutable DeploymentConfig
    retry: Fixed-delay, bounded-attempt RetryExecutor
    graph: DependencyGraph and execution waves
    pipeline: DeploymentPipeline state machine and step helpers
    reporter: Structured progress events
    exceptions: Custom exception types

Usage:
    from arvr_infra.core import DeploymentPipeline, RetryExecutor, resolve_config
"""

from .config import DeploymentConfig, DeploymentSettings, resolve_config
from .exceptions import (
    ConfigurationError,
    ConnectivityError,
    DeploymentError,
    RetryExhaustedError,
    StepExhaustionError,
    ValidationError,
)
from .graph import DependencyGraph
from .pipeline import (
    DeploymentPipeline,
    DeploymentResult,
    PipelineState,
    Step,
    StepContext,
    StepResult,
)
from .protocols import ResourceClients
from .reporter import Reporter
from .retry import RetryExecutor, RetryPolicy

__all__ = [
    # Config
    "DeploymentConfig",
    "DeploymentSettings",
    "resolve_config",
    # Engine
    "DependencyGraph",
    "DeploymentPipeline",
    "DeploymentResult",
    "PipelineState",
    "Step",
    "StepContext",
    "StepResult",
    "RetryExecutor",
    "RetryPolicy",
    "Reporter",
    "ResourceClients",
    # Exceptions
    "DeploymentError",
    "ValidationError",
    "ConfigurationError",
    "ConnectivityError",
    "RetryExhaustedError",
    "StepExhaustionError",
]
