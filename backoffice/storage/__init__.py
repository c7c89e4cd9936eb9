"""
Persisted state
"""
from .state_store import PersistedStateStore, close_redis, get_redis, init_redis

__all__ = [
    "PersistedStateStore",
    "close_redis",
    "get_redis",
    "init_redis",
]
