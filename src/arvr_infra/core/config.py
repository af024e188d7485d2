"""
Configuration resolution.

Deployment parameters come from the process environment (and an optional
`.env` file) layered over built-in defaults. Resolution happens exactly
once at startup; the result is an immutable DeploymentConfig that every
step may read concurrently.

Resolution Order:
    1. DeploymentSettings reads environment variables / `.env`; values
       that do not parse become a ConfigurationError (empty values are
       treated as unset)
    2. resolve_config() checks the mandatory keys and fails fast,
       naming every missing key
    3. Names and retry tuning are validated
    4. The frozen DeploymentConfig is assembled from settings + constants

Usage:
    from arvr_infra.core.config import resolve_config

    config = resolve_config()
"""

import re
from dataclasses import dataclass
from typing import Optional, Tuple

from pydantic import SecretStr
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .. import constants as CONSTANTS
from .exceptions import ConfigurationError

STORAGE_ACCOUNT_PATTERN = re.compile(r"^[a-z0-9]{3,24}$")
CDN_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9-]{0,48}[a-zA-Z0-9]$")


class DeploymentSettings(BaseSettings):
    # Mandatory (checked by resolve_config, not by pydantic, so that all
    # missing keys are reported together)
    AZURE_SUBSCRIPTION_ID: str = ""
    DB_PASSWORD: SecretStr = SecretStr("")

    # Optional overrides
    RESOURCE_GROUP_NAME: str = CONSTANTS.DEFAULT_RESOURCE_GROUP_NAME
    LOCATION: str = CONSTANTS.DEFAULT_LOCATION
    STORAGE_ACCOUNT_NAME: str = CONSTANTS.DEFAULT_STORAGE_ACCOUNT_NAME
    DB_USERNAME: str = CONSTANTS.DEFAULT_DB_USERNAME

    # Service principal (all three or none)
    AZURE_TENANT_ID: str = ""
    AZURE_CLIENT_ID: str = ""
    AZURE_CLIENT_SECRET: SecretStr = SecretStr("")

    # Engine tuning
    RETRY_MAX_ATTEMPTS: int = CONSTANTS.DEFAULT_MAX_ATTEMPTS
    RETRY_DELAY_SECONDS: float = CONSTANTS.DEFAULT_RETRY_DELAY_SECONDS
    ATTEMPT_TIMEOUT_SECONDS: Optional[float] = None
    PARALLEL_COMPUTE: bool = False
    DEPLOY_MODE: str = ""

    model_config = SettingsConfigDict(
        env_file=CONSTANTS.DEFAULT_ENV_FILE,
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
    )


@dataclass(frozen=True)
class SubnetSpec:
    name: str
    address_prefix: str


@dataclass(frozen=True)
class NetworkSpec:
    vnet_name: str
    address_space: str
    subnets: Tuple[SubnetSpec, ...]


@dataclass(frozen=True)
class NodePoolSpec:
    name: str
    count: int
    vm_size: str
    mode: str
    os_type: str


@dataclass(frozen=True)
class ClusterSpec:
    name: str
    dns_prefix: str
    node_pool: NodePoolSpec
    identity_type: str


@dataclass(frozen=True)
class DatabaseSpec:
    server_name: str
    admin_username: str
    admin_password: SecretStr
    version: str
    sku_name: str
    sku_tier: str
    storage_size_gb: int


@dataclass(frozen=True)
class StorageSpec:
    account_name: str
    sku: str
    kind: str
    container_name: str
    container_access: str


@dataclass(frozen=True)
class CdnSpec:
    profile_name: str
    endpoint_name: str
    sku: str
    origin_name: str


@dataclass(frozen=True)
class RetrySettings:
    max_attempts: int
    delay_seconds: float
    attempt_timeout: Optional[float]


@dataclass(frozen=True)
class ServicePrincipal:
    tenant_id: str
    client_id: str
    client_secret: SecretStr


@dataclass(frozen=True)
class DeploymentConfig:
    """
    Immutable deployment parameters, resolved once per process.

    Attributes:
        subscription_id: Target Azure subscription
        resource_group_name: Resource group holding every resource
        location: Azure region for all resources
        network: Virtual network and subnet layout
        cluster: AKS cluster name and node pool shape
        database: PostgreSQL server name, credentials, version and tier
        storage: Storage account and asset container
        cdn: CDN profile and endpoint names
        retry: Retry policy tuning shared by every step
        parallel_compute: Run cluster and database creation concurrently
        debug: Verbose logging requested via DEPLOY_MODE
        service_principal: Explicit credentials, or None for the default chain
    """

    subscription_id: str
    resource_group_name: str
    location: str
    network: NetworkSpec
    cluster: ClusterSpec
    database: DatabaseSpec
    storage: StorageSpec
    cdn: CdnSpec
    retry: RetrySettings
    parallel_compute: bool = False
    debug: bool = False
    service_principal: Optional[ServicePrincipal] = None


def _missing_keys(settings: DeploymentSettings) -> list[str]:
    present = {
        CONSTANTS.ENV_SUBSCRIPTION_ID: settings.AZURE_SUBSCRIPTION_ID.strip(),
        CONSTANTS.ENV_DB_PASSWORD: settings.DB_PASSWORD.get_secret_value(),
    }
    return [key for key in CONSTANTS.REQUIRED_ENV_VARS if not present.get(key)]


def _load_settings() -> DeploymentSettings:
    try:
        return DeploymentSettings()
    except PydanticValidationError as e:
        problems = {}
        for error in e.errors():
            if error.get("loc"):
                problems.setdefault(str(error["loc"][0]), error["msg"])

        # Reload with the unparsable fields pinned to their defaults so the
        # mandatory keys can still be checked
        fields = DeploymentSettings.model_fields
        defaults = {name: fields[name].default for name in problems if name in fields}
        missing = _missing_keys(DeploymentSettings(**defaults))

        message = "Invalid environment variables: " + "; ".join(
            f"{name} ({reason})" for name, reason in sorted(problems.items())
        ) + "."
        if missing:
            message += f" Missing required environment variables: {', '.join(missing)}."
        raise ConfigurationError(message, missing_keys=missing) from e


def _validate_names(settings: DeploymentSettings) -> None:
    for key in ("RESOURCE_GROUP_NAME", "LOCATION", "DB_USERNAME"):
        if not getattr(settings, key).strip():
            raise ConfigurationError(f"{key} must not be empty.")

    if not STORAGE_ACCOUNT_PATTERN.match(settings.STORAGE_ACCOUNT_NAME):
        raise ConfigurationError(
            f"Invalid STORAGE_ACCOUNT_NAME '{settings.STORAGE_ACCOUNT_NAME}': "
            "must be 3-24 characters, lowercase letters and digits only."
        )

    for name in (CONSTANTS.CDN_PROFILE_NAME, CONSTANTS.CDN_ENDPOINT_NAME):
        if not CDN_NAME_PATTERN.match(name):
            raise ConfigurationError(f"Invalid CDN resource name '{name}'.")


def _validate_retry(settings: DeploymentSettings) -> None:
    if settings.RETRY_MAX_ATTEMPTS < 1:
        raise ConfigurationError(
            f"RETRY_MAX_ATTEMPTS must be at least 1, got {settings.RETRY_MAX_ATTEMPTS}."
        )
    if settings.RETRY_DELAY_SECONDS < 0:
        raise ConfigurationError(
            f"RETRY_DELAY_SECONDS must not be negative, got {settings.RETRY_DELAY_SECONDS}."
        )
    if settings.ATTEMPT_TIMEOUT_SECONDS is not None and settings.ATTEMPT_TIMEOUT_SECONDS <= 0:
        raise ConfigurationError(
            f"ATTEMPT_TIMEOUT_SECONDS must be positive, got {settings.ATTEMPT_TIMEOUT_SECONDS}."
        )


def _service_principal(settings: DeploymentSettings) -> Optional[ServicePrincipal]:
    values = (
        settings.AZURE_TENANT_ID,
        settings.AZURE_CLIENT_ID,
        settings.AZURE_CLIENT_SECRET.get_secret_value(),
    )
    if all(values):
        return ServicePrincipal(
            tenant_id=settings.AZURE_TENANT_ID,
            client_id=settings.AZURE_CLIENT_ID,
            client_secret=settings.AZURE_CLIENT_SECRET,
        )
    if any(values):
        raise ConfigurationError(
            "Incomplete service principal: set AZURE_TENANT_ID, AZURE_CLIENT_ID and "
            "AZURE_CLIENT_SECRET together, or none of them."
        )
    return None


def resolve_config(settings: Optional[DeploymentSettings] = None) -> DeploymentConfig:
    """
    Resolve and validate the deployment configuration.

    Args:
        settings: Pre-loaded settings; read from the environment if omitted.

    Returns:
        The immutable DeploymentConfig.

    Raises:
        ConfigurationError: If a mandatory key is missing (all missing keys
            are listed) or a value fails validation.
    """
    if settings is None:
        settings = _load_settings()

    missing = _missing_keys(settings)
    if missing:
        raise ConfigurationError(
            f"Missing required environment variables: {', '.join(missing)}. "
            "Please set these variables in your environment or .env file.",
            missing_keys=missing,
        )

    _validate_names(settings)
    _validate_retry(settings)

    return DeploymentConfig(
        subscription_id=settings.AZURE_SUBSCRIPTION_ID.strip(),
        resource_group_name=settings.RESOURCE_GROUP_NAME,
        location=settings.LOCATION,
        network=NetworkSpec(
            vnet_name=CONSTANTS.VNET_NAME,
            address_space=CONSTANTS.VNET_ADDRESS_SPACE,
            subnets=(
                SubnetSpec(CONSTANTS.APP_SUBNET_NAME, CONSTANTS.APP_SUBNET_PREFIX),
                SubnetSpec(CONSTANTS.DB_SUBNET_NAME, CONSTANTS.DB_SUBNET_PREFIX),
            ),
        ),
        cluster=ClusterSpec(
            name=CONSTANTS.AKS_NAME,
            dns_prefix=CONSTANTS.AKS_DNS_PREFIX,
            node_pool=NodePoolSpec(
                name=CONSTANTS.AKS_POOL_NAME,
                count=CONSTANTS.AKS_NODE_COUNT,
                vm_size=CONSTANTS.AKS_VM_SIZE,
                mode=CONSTANTS.AKS_POOL_MODE,
                os_type=CONSTANTS.AKS_OS_TYPE,
            ),
            identity_type=CONSTANTS.AKS_IDENTITY_TYPE,
        ),
        database=DatabaseSpec(
            server_name=CONSTANTS.DB_SERVER_NAME,
            admin_username=settings.DB_USERNAME,
            admin_password=settings.DB_PASSWORD,
            version=CONSTANTS.DB_VERSION,
            sku_name=CONSTANTS.DB_SKU_NAME,
            sku_tier=CONSTANTS.DB_SKU_TIER,
            storage_size_gb=CONSTANTS.DB_STORAGE_SIZE_GB,
        ),
        storage=StorageSpec(
            account_name=settings.STORAGE_ACCOUNT_NAME,
            sku=CONSTANTS.STORAGE_SKU,
            kind=CONSTANTS.STORAGE_KIND,
            container_name=CONSTANTS.STORAGE_CONTAINER_NAME,
            container_access=CONSTANTS.STORAGE_CONTAINER_ACCESS,
        ),
        cdn=CdnSpec(
            profile_name=CONSTANTS.CDN_PROFILE_NAME,
            endpoint_name=CONSTANTS.CDN_ENDPOINT_NAME,
            sku=CONSTANTS.CDN_SKU,
            origin_name=CONSTANTS.CDN_ORIGIN_NAME,
        ),
        retry=RetrySettings(
            max_attempts=settings.RETRY_MAX_ATTEMPTS,
            delay_seconds=settings.RETRY_DELAY_SECONDS,
            attempt_timeout=settings.ATTEMPT_TIMEOUT_SECONDS,
        ),
        parallel_compute=settings.PARALLEL_COMPUTE,
        debug=settings.DEPLOY_MODE.upper() == "DEBUG",
        service_principal=_service_principal(settings),
    )
