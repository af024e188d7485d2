"""
CLI entry point tests.

The Azure provider is replaced by a fake async context manager so the
whole deploy path runs against mock Resource Clients; exit codes and
operator-facing output are asserted here.
"""

import pytest
from unittest.mock import MagicMock, patch

from arvr_infra import constants as CONSTANTS
from arvr_infra import main as cli
from arvr_infra.core.protocols import ResourceClients
from tests.conftest import TEST_DB_PASSWORD, TEST_SUBSCRIPTION


@pytest.fixture
def env(monkeypatch):
    monkeypatch.setenv("AZURE_SUBSCRIPTION_ID", TEST_SUBSCRIPTION)
    monkeypatch.setenv("DB_PASSWORD", TEST_DB_PASSWORD)
    monkeypatch.setenv("RETRY_DELAY_SECONDS", "0")


@pytest.fixture
def fake_provider(mock_clients):
    """Patch AzureProvider with a context manager handing out mock_clients."""

    class FakeProvider:
        instances = []

        def __init__(self, config):
            self.config = config
            FakeProvider.instances.append(self)

        async def __aenter__(self):
            return self

        async def __aexit__(self, *exc_info):
            return None

        def resource_clients(self) -> ResourceClients:
            return mock_clients

    with patch("arvr_infra.main.AzureProvider", FakeProvider):
        yield FakeProvider


class TestDeployCommand:

    def test_missing_password_exits_before_any_azure_call(self, monkeypatch, capsys):
        monkeypatch.setenv("AZURE_SUBSCRIPTION_ID", TEST_SUBSCRIPTION)

        with patch("arvr_infra.main.AzureProvider") as provider_cls:
            exit_code = cli.main(["deploy"])

        assert exit_code == CONSTANTS.EXIT_FAILURE
        provider_cls.assert_not_called()
        assert "DB_PASSWORD" in capsys.readouterr().out

    def test_malformed_tuning_value_exits_with_failure(self, env, monkeypatch, capsys):
        monkeypatch.setenv("RETRY_MAX_ATTEMPTS", "three")

        with patch("arvr_infra.main.AzureProvider") as provider_cls:
            exit_code = cli.main(["deploy"])

        assert exit_code == CONSTANTS.EXIT_FAILURE
        provider_cls.assert_not_called()
        assert "RETRY_MAX_ATTEMPTS" in capsys.readouterr().out

    def test_empty_optional_value_is_ignored(self, env, monkeypatch):
        monkeypatch.setenv("ATTEMPT_TIMEOUT_SECONDS", "")

        assert cli.main(["plan"]) == CONSTANTS.EXIT_SUCCESS

    def test_provider_setup_error_exits_with_failure(self, env, mock_clients, capsys):
        with patch("arvr_infra.main.AzureProvider", side_effect=ImportError("no aio transport")):
            exit_code = cli.main(["deploy"])

        assert exit_code == CONSTANTS.EXIT_FAILURE
        mock_clients.resource_groups.create_or_update.assert_not_awaited()
        out = capsys.readouterr().out
        assert "ImportError: no aio transport" in out
        assert TEST_DB_PASSWORD not in out

    def test_successful_deploy(self, env, fake_provider, mock_clients, capsys):
        exit_code = cli.main(["deploy"])

        assert exit_code == CONSTANTS.EXIT_SUCCESS
        assert len(fake_provider.instances) == 1
        mock_clients.cdn.create_endpoint.assert_awaited_once()
        out = capsys.readouterr().out
        assert "AR/VR E-commerce Infrastructure Deployment" in out
        assert "completed successfully" in out
        assert TEST_DB_PASSWORD not in out

    def test_parallel_compute_flag_reaches_config(self, env, fake_provider):
        assert cli.main(["deploy", "--parallel-compute"]) == CONSTANTS.EXIT_SUCCESS

        assert fake_provider.instances[0].config.parallel_compute is True

    def test_storage_failure_exits_nonzero_and_skips_cdn(self, env, fake_provider, mock_clients, capsys):
        mock_clients.storage.create_account.side_effect = RuntimeError("StorageAccountAlreadyTaken")

        exit_code = cli.main(["deploy"])

        assert exit_code == CONSTANTS.EXIT_FAILURE
        assert mock_clients.storage.create_account.await_count == 3
        mock_clients.cdn.create_profile.assert_not_awaited()
        out = capsys.readouterr().out
        assert "Create Storage Account and Container" in out
        assert "StorageAccountAlreadyTaken" in out

    def test_connectivity_failure(self, env, fake_provider, mock_clients, capsys):
        mock_clients.subscription.get_subscription.side_effect = RuntimeError("SubscriptionNotFound")

        assert cli.main(["deploy"]) == CONSTANTS.EXIT_FAILURE
        mock_clients.resource_groups.create_or_update.assert_not_awaited()

    def test_keyboard_interrupt(self, env, fake_provider):
        with patch("arvr_infra.main.deploy", MagicMock(side_effect=KeyboardInterrupt)):
            assert cli.main(["deploy"]) == CONSTANTS.EXIT_INTERRUPTED


class TestPlanCommand:

    def test_sequential_plan(self, env, capsys):
        with patch("arvr_infra.main.AzureProvider") as provider_cls:
            assert cli.main(["plan"]) == CONSTANTS.EXIT_SUCCESS

        provider_cls.assert_not_called()
        out = capsys.readouterr().out
        assert "1. Create Resource Group" in out
        assert "3. Create AKS Cluster" in out
        assert "4. Create PostgreSQL Server" in out
        assert "6. Create CDN Profile and Endpoint" in out
        assert "(concurrent)" not in out

    def test_parallel_plan_marks_compute_wave(self, env, capsys):
        assert cli.main(["plan", "--parallel-compute"]) == CONSTANTS.EXIT_SUCCESS

        out = capsys.readouterr().out
        assert "3. Create AKS Cluster (concurrent)" in out
        assert "4. Create PostgreSQL Server (concurrent)" in out


class TestDestroyCommand:

    def test_destroy_with_yes(self, env, fake_provider, mock_clients):
        assert cli.main(["destroy", "--yes"]) == CONSTANTS.EXIT_SUCCESS

        mock_clients.resource_groups.delete.assert_awaited_once_with(CONSTANTS.DEFAULT_RESOURCE_GROUP_NAME)

    def test_destroy_aborted_without_confirmation(self, env, fake_provider, mock_clients, monkeypatch):
        monkeypatch.setattr("builtins.input", lambda prompt: "n")

        assert cli.main(["destroy"]) == CONSTANTS.EXIT_SUCCESS

        assert fake_provider.instances == []
        mock_clients.resource_groups.delete.assert_not_awaited()

    def test_destroy_confirmed_interactively(self, env, fake_provider, mock_clients, monkeypatch):
        monkeypatch.setattr("builtins.input", lambda prompt: "yes")

        assert cli.main(["destroy"]) == CONSTANTS.EXIT_SUCCESS

        mock_clients.resource_groups.delete.assert_awaited_once()

    def test_destroy_failure(self, env, fake_provider, mock_clients):
        mock_clients.resource_groups.delete.side_effect = RuntimeError("Conflict")

        assert cli.main(["destroy", "--yes"]) == CONSTANTS.EXIT_FAILURE


def test_command_is_required():
    with pytest.raises(SystemExit):
        cli.main([])
