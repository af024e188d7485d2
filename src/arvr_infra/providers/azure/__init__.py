"""Azure provider: SDK adapters, client lifetime and provisioning steps."""

from .provider import AzureProvider

__all__ = ["AzureProvider"]
