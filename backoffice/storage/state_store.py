"""
Persisted State Store

Redis-backed key-value store for the small amount of state that survives a
restart: the authentication blob and whitelisted UI preferences. Reference
data is never written here.
"""

import json
from typing import Any, Dict, Optional

import structlog
from redis.asyncio import ConnectionPool, Redis

logger = structlog.get_logger(__name__)

AUTH_KEYS = ("user", "token", "refreshToken", "isAuthenticated")
UI_KEYS = ("theme", "sidebarCollapsed")

# Global Redis connection
_redis_pool: Optional[ConnectionPool] = None
_redis_client: Optional[Redis] = None


async def init_redis(settings) -> Redis:
    """Initialize Redis connection pool"""
    global _redis_pool, _redis_client

    if _redis_client is not None:
        return _redis_client

    _redis_pool = ConnectionPool.from_url(
        settings.redis.get_url(),
        max_connections=settings.redis.max_connections,
        socket_timeout=settings.redis.socket_timeout,
        decode_responses=settings.redis.decode_responses,
    )
    _redis_client = Redis(connection_pool=_redis_pool)

    try:
        await _redis_client.ping()
        logger.info("Redis connection established")
    except Exception as e:
        logger.error("Redis connection failed", error=str(e))
        await close_redis()
        raise

    return _redis_client


async def close_redis() -> None:
    """Close Redis connection pool"""
    global _redis_pool, _redis_client

    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None

    if _redis_pool:
        await _redis_pool.disconnect()
        _redis_pool = None

    logger.info("Redis connection closed")


def get_redis() -> Redis:
    """Get Redis client instance"""
    if _redis_client is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis_client


class PersistedStateStore:
    """
    Namespaced JSON blobs for the ``auth`` and ``ui`` slices.

    Example:
        store = PersistedStateStore(redis, namespace="persist")
        await store.save_auth({"token": token, "isAuthenticated": True})
        await store.save_ui_preference("theme", "dark")
    """

    def __init__(self, redis: Redis, namespace: str = "persist"):
        self.redis = redis
        self.namespace = namespace

    def _key(self, slice_name: str) -> str:
        return f"{self.namespace}:{slice_name}"

    async def _load(self, slice_name: str) -> Optional[Dict[str, Any]]:
        raw = await self.redis.get(self._key(slice_name))
        if raw is None:
            return None
        try:
            value = json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.warning("Discarding corrupt persisted state", slice=slice_name, error=str(e))
            await self.redis.delete(self._key(slice_name))
            return None
        if not isinstance(value, dict):
            logger.warning("Discarding corrupt persisted state", slice=slice_name, error="not an object")
            await self.redis.delete(self._key(slice_name))
            return None
        return value

    async def _save(self, slice_name: str, value: Dict[str, Any]) -> None:
        await self.redis.set(self._key(slice_name), json.dumps(value, default=str))

    async def save_auth(self, state: Dict[str, Any]) -> None:
        """Persist the whitelisted auth fields; other keys are dropped."""
        await self._save("auth", {k: state[k] for k in AUTH_KEYS if k in state})

    async def load_auth(self) -> Optional[Dict[str, Any]]:
        state = await self._load("auth")
        if state is None:
            return None
        return {k: state[k] for k in AUTH_KEYS if k in state}

    async def clear_auth(self) -> None:
        await self.redis.delete(self._key("auth"))

    async def save_ui_preference(self, key: str, value: Any) -> None:
        if key not in UI_KEYS:
            raise ValueError(f"UI preference '{key}' is not persisted; allowed: {', '.join(UI_KEYS)}")
        prefs = await self._load("ui") or {}
        prefs[key] = value
        await self._save("ui", prefs)

    async def load_ui_preferences(self) -> Dict[str, Any]:
        prefs = await self._load("ui") or {}
        return {k: prefs[k] for k in UI_KEYS if k in prefs}
