"""AzureProvider credential selection and client lifetime."""

import dataclasses

import pytest
from azure.core.exceptions import ClientAuthenticationError
from pydantic import SecretStr
from unittest.mock import MagicMock, patch

from arvr_infra.core.config import ServicePrincipal
from arvr_infra.core.protocols import ResourceClients
from arvr_infra.providers.azure.clients import AzureCdnClient, AzureNetworkClient
from arvr_infra.providers.azure.provider import AzureProvider, FATAL_ERRORS


class TestCredential:

    def test_default_credential_chain(self, config):
        with patch("azure.identity.aio.DefaultAzureCredential") as default_cls:
            credential = AzureProvider(config)._get_credential()

        assert credential is default_cls.return_value

    def test_service_principal(self, config):
        config = dataclasses.replace(
            config,
            service_principal=ServicePrincipal("tenant", "client", SecretStr("secret")),
        )

        with patch("azure.identity.aio.ClientSecretCredential") as secret_cls:
            AzureProvider(config)._get_credential()

        secret_cls.assert_called_once_with(tenant_id="tenant", client_id="client", client_secret="secret")


class TestLifetime:

    def test_clients_unavailable_before_enter(self, config):
        with pytest.raises(RuntimeError, match="not initialized"):
            AzureProvider(config).clients

    async def test_enter_builds_adapters_and_exit_closes_clients(self, config):
        provider = AzureProvider(config)
        credential = MagicMock()
        sdk_clients = {
            key: MagicMock()
            for key in ("subscription", "resource", "network", "aks", "postgres", "storage", "cdn")
        }

        with patch.object(AzureProvider, "_get_credential", return_value=credential), \
                patch.object(AzureProvider, "_create_sdk_clients", return_value=sdk_clients):
            async with provider:
                clients = provider.resource_clients()
                assert isinstance(clients, ResourceClients)
                assert isinstance(clients.network, AzureNetworkClient)
                assert isinstance(clients.cdn, AzureCdnClient)

        for client in sdk_clients.values():
            client.__aexit__.assert_awaited_once()
        credential.__aexit__.assert_awaited_once()
        with pytest.raises(RuntimeError):
            provider.clients

    def test_authentication_errors_are_fatal(self):
        assert ClientAuthenticationError in FATAL_ERRORS
