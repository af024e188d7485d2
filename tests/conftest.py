import pytest
from unittest.mock import AsyncMock

from arvr_infra.core.config import DeploymentSettings, resolve_config
from arvr_infra.core.pipeline import StepContext
from arvr_infra.core.protocols import ResourceClients
from arvr_infra.core.reporter import Reporter
from arvr_infra.core.retry import RetryExecutor, RetryPolicy
from arvr_infra.logger import clear_secrets

CONFIG_ENV_VARS = [
    "AZURE_SUBSCRIPTION_ID",
    "DB_PASSWORD",
    "RESOURCE_GROUP_NAME",
    "LOCATION",
    "STORAGE_ACCOUNT_NAME",
    "DB_USERNAME",
    "AZURE_TENANT_ID",
    "AZURE_CLIENT_ID",
    "AZURE_CLIENT_SECRET",
    "RETRY_MAX_ATTEMPTS",
    "RETRY_DELAY_SECONDS",
    "ATTEMPT_TIMEOUT_SECONDS",
    "PARALLEL_COMPUTE",
    "DEPLOY_MODE",
]

TEST_SUBSCRIPTION = "00000000-1111-2222-3333-444444444444"
TEST_DB_PASSWORD = "S3cr3t-P@ssw0rd"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate tests from the developer's environment and any .env file."""
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    clear_secrets()
    yield
    clear_secrets()


def make_settings(**overrides) -> DeploymentSettings:
    values = {
        "AZURE_SUBSCRIPTION_ID": TEST_SUBSCRIPTION,
        "DB_PASSWORD": TEST_DB_PASSWORD,
    }
    values.update(overrides)
    return DeploymentSettings(_env_file=None, **values)


@pytest.fixture
def config():
    return resolve_config(make_settings())


@pytest.fixture
def mock_clients():
    """One AsyncMock per resource domain."""
    return ResourceClients(
        subscription=AsyncMock(),
        resource_groups=AsyncMock(),
        network=AsyncMock(),
        cluster=AsyncMock(),
        database=AsyncMock(),
        storage=AsyncMock(),
        cdn=AsyncMock(),
    )


@pytest.fixture
def sleeps():
    """Delays requested by the retry executor, in order."""
    return []


@pytest.fixture
def fake_sleep(sleeps):
    async def _sleep(delay):
        sleeps.append(delay)
    return _sleep


@pytest.fixture
def reporter():
    return Reporter()


@pytest.fixture
def executor(fake_sleep, reporter):
    return RetryExecutor(RetryPolicy(max_attempts=3, delay_seconds=5.0), reporter, sleep=fake_sleep)


@pytest.fixture
def step_context(config, mock_clients, executor, reporter):
    return StepContext(config=config, clients=mock_clients, executor=executor, reporter=reporter)
