"""Access to the remote family tree store."""

from .base import TreeStore
from .errors import ApiError, FamilyTreeAPIError, NetworkError
from .http import ENDPOINTS, ClientConfig, FamilyTreeClient

__all__ = [
    "ENDPOINTS",
    "ApiError",
    "ClientConfig",
    "FamilyTreeAPIError",
    "FamilyTreeClient",
    "NetworkError",
    "TreeStore",
]
