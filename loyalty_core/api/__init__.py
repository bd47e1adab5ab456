"""
HTTP clients for the LoyaltyHub REST backend and AI microservice
"""

from .base_connector import BaseAPIConnector, APIConfig, BearerTokenAuth
from .backend_client import BackendClient
from .ai_client import AIServiceClient, AIConfig

__all__ = [
    # Base classes
    "BaseAPIConnector",
    "APIConfig",
    "BearerTokenAuth",

    # Clients
    "BackendClient",
    "AIServiceClient",
    "AIConfig",
]
