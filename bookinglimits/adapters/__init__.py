"""
Adapters layer - External integrations (marketplace Integration API).
"""

from .integration_authenticator import IntegrationAuthenticator
from .integration_client import IntegrationClient, build_integration_client
from .mock_integration_client import MockIntegrationClient

__all__ = [
    "IntegrationAuthenticator",
    "IntegrationClient",
    "MockIntegrationClient",
    "build_integration_client",
]
