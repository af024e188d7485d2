"""
Custom exceptions for the infrastructure deployer.

This module defines the hierarchy of exceptions used by the deployment
engine to separate pre-flight failures from provisioning failures.

Exception Hierarchy:
    DeploymentError (base)
    ├── ValidationError - Nothing was provisioned; the run never started
    │   ├── ConfigurationError - Missing or invalid configuration
    │   └── ConnectivityError - Subscription could not be resolved
    ├── RetryExhaustedError - One operation failed on every attempt
    └── StepExhaustionError - A pipeline step failed terminally

Transient failures have no type of their own: any exception raised by an
attempt that is not the final one is logged and retried.
"""

from typing import Dict, Optional, Sequence


class DeploymentError(Exception):
    """
    Base exception for all deployment-related errors.

    Attributes:
        message: Human-readable error description
        provider: Optional provider name where error occurred
        step: Optional pipeline step name where error occurred
    """

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        step: Optional[str] = None
    ):
        self.message = message
        self.provider = provider
        self.step = step

        details = []
        if provider:
            details.append(f"provider={provider}")
        if step:
            details.append(f"step={step}")

        if details:
            full_message = f"{message} [{', '.join(details)}]"
        else:
            full_message = message

        super().__init__(full_message)


class ValidationError(DeploymentError):
    """
    Raised before any provisioning step runs.

    A ValidationError guarantees that no Resource Client call was made
    for provisioning.
    """


class ConfigurationError(ValidationError):
    """
    Raised when configuration is invalid or mandatory keys are missing.

    Example:
        >>> resolve_config(DeploymentSettings(AZURE_SUBSCRIPTION_ID=""))
        ConfigurationError: Missing required environment variables: AZURE_SUBSCRIPTION_ID, DB_PASSWORD

    Attributes:
        missing_keys: Names of the absent mandatory environment variables
    """

    def __init__(self, message: str, missing_keys: Optional[Sequence[str]] = None):
        self.missing_keys = list(missing_keys or [])
        super().__init__(message)


class ConnectivityError(ValidationError):
    """Raised when the target subscription cannot be resolved."""

    def __init__(self, subscription_id: str, original_error: Optional[Exception] = None):
        self.subscription_id = subscription_id
        self.original_error = original_error

        message = f"Failed to connect to subscription '{subscription_id}'. Please check your credentials."
        if original_error:
            message += f" ({type(original_error).__name__}: {original_error})"

        super().__init__(message, provider="azure")


class RetryExhaustedError(DeploymentError):
    """
    Terminal error of the retry executor.

    Attributes:
        operation_name: Name of the retried operation
        attempts: Number of attempts actually performed
        last_error: The exception raised by the final attempt
    """

    def __init__(self, operation_name: str, attempts: int, last_error: Exception):
        self.operation_name = operation_name
        self.attempts = attempts
        self.last_error = last_error

        message = f"Operation {operation_name} failed after {attempts} attempt"
        if attempts != 1:
            message += "s"
        message += f": {type(last_error).__name__}: {last_error}"

        super().__init__(message)


class StepExhaustionError(DeploymentError):
    """
    Raised when a provisioning step fails terminally.

    This wraps the exhausted operation with context about which resource
    and which (non-secret) config values were involved.

    Attributes:
        step_name: Display name of the failed step
        resource_type: Type of resource (e.g., "storage account")
        resource_name: Name of the resource that failed
        details: Non-secret config values used by the failed call
        attempts: Attempts made by the exhausted operation
        cause: The last underlying error
        action: Verb used in the message ("create", "delete")
    """

    def __init__(
        self,
        step_name: str,
        resource_type: str,
        resource_name: str,
        cause: Exception,
        attempts: int = 0,
        details: Optional[Dict[str, str]] = None,
        provider: Optional[str] = None,
        action: str = "create"
    ):
        self.step_name = step_name
        self.resource_type = resource_type
        self.resource_name = resource_name
        self.cause = cause
        self.attempts = attempts
        self.details = dict(details or {})
        self.action = action

        message = f"Failed to {action} {resource_type} '{resource_name}'"
        if self.details:
            rendered = ", ".join(f"{k}={v}" for k, v in self.details.items())
            message += f" ({rendered})"
        message += f": {cause}"

        super().__init__(message, provider=provider, step=step_name)
