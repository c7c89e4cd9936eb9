"""
Remote back-office API clients
"""
from .errors import ApiException, AuthenticationRequired
from .client import ApiClient

__all__ = [
    "ApiClient",
    "ApiException",
    "AuthenticationRequired",
]
