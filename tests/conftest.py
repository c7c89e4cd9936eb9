"""
Test Suite Configuration
"""
import asyncio
from typing import Any, Dict, List, Optional

import pytest

from backoffice.api.errors import ApiException
from backoffice.config.settings import AuthSettings, RetrySettings, Settings
from backoffice.models import Brand, Game, Operator, Platform, Resource


PLATFORMS = [
    {"_id": "p1", "platformName": "Zeta Gaming"},
    {"_id": "p2", "platformName": "alpha Play"},
    {"_id": "p3", "platformName": "Mid Platform"},
]

OPERATORS = [
    {"_id": "o1", "operatorName": "Operator One", "platform": "p1"},
    {"_id": "o2", "operatorName": "Operator Two", "platform": "p1"},
    {"_id": "o3", "operatorName": "Operator Three", "platform": "p2"},
]

BRANDS = [
    {"_id": "b1", "brandName": "Brand A", "platform": "p1", "operator": "o1", "isActive": True},
    {"_id": "b2", "brandName": "Brand B", "platform": "p1", "operator": "o2", "isActive": False},
    {"_id": "b3", "brandName": "Brand C", "platform": "p2", "operator": "o3", "isActive": True},
]

GAMES = [
    {"_id": "g1", "gameName": "Crash X", "gameAlias": "crash-x"},
    {"_id": "g2", "gameName": "Aviator", "gameAlias": "aviator"},
    {"_id": "g3", "gameName": "Aviator", "gameAlias": "aviator"},
]


class FakeClock:
    """Manually advanced monotonic clock"""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeFetcher:
    """
    Stand-in for the remote list fetcher that counts calls per resource.

    ``release`` can be cleared to hold fetches in flight; ``failures`` maps a
    resource to the exception its next fetch raises.
    """

    def __init__(self, data: Optional[Dict[Resource, List[Any]]] = None):
        self.data = data or {}
        self.calls: Dict[Resource, int] = {r: 0 for r in Resource}
        self.params: List[Any] = []
        self.failures: Dict[Resource, Exception] = {}
        self.release = asyncio.Event()
        self.release.set()

    async def fetch(self, resource: Resource, params: Optional[Dict[str, Any]] = None) -> List[Any]:
        self.calls[resource] += 1
        self.params.append(params)
        await self.release.wait()
        if resource in self.failures:
            raise self.failures.pop(resource)
        return list(self.data.get(resource, []))


class FakeRedis:
    """In-memory subset of the redis.asyncio client used by the state store"""

    def __init__(self):
        self.values: Dict[str, str] = {}

    async def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    async def set(self, key: str, value: str) -> bool:
        self.values[key] = value
        return True

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.values.pop(key, None) is not None:
                removed += 1
        return removed

    async def ping(self) -> bool:
        return True


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(
        APP_ENV="testing",
        DEBUG=True,
        auth=AuthSettings(settle_seconds=0.01),
        retry=RetrySettings(retries=2, base_delay_seconds=0.0, max_delay_seconds=0.0),
    )


@pytest.fixture
def platforms() -> List[Platform]:
    return [Platform.model_validate(p) for p in PLATFORMS]


@pytest.fixture
def operators() -> List[Operator]:
    return [Operator.model_validate(o) for o in OPERATORS]


@pytest.fixture
def brands() -> List[Brand]:
    return [Brand.model_validate(b) for b in BRANDS]


@pytest.fixture
def games() -> List[Game]:
    return [Game.model_validate(g) for g in GAMES]


@pytest.fixture
def fetcher(platforms, operators, brands, games) -> FakeFetcher:
    return FakeFetcher({
        Resource.PLATFORMS: platforms,
        Resource.OPERATORS: operators,
        Resource.BRANDS: brands,
        Resource.GAMES: games,
    })


@pytest.fixture
def empty_fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def server_error() -> ApiException:
    return ApiException(503, "Service temporarily unavailable")


@pytest.fixture
def chart_payload() -> Dict[str, Any]:
    """Dashboard chart summary as returned by the analytics source"""
    return {
        "generic": {
            "betCounts": 40,
            "betAmount": 1000.0,
            "winAmount": 800.0,
            "ggr": 200.0,
            "margin": 20.0,
            "updatedAt": "2024-01-01T12:00:00Z",
        },
        "betsGGRTurnOver": [
            {"hour": 11, "betCounts": 10, "betAmount": 400.0, "winAmount": 500.0, "ggr": -100.0},
            {"hour": 10, "betCounts": 30, "betAmount": 600.0, "winAmount": 300.0, "ggr": 300.0},
        ],
        "turnOverByOperator": [
            {"brandName": "Brand A", "brandId": "b1", "betCounts": 5, "betAmount": 300.0, "winAmount": 100.0},
            {"brandName": "Ghost", "brandId": "b9", "betCounts": 5, "betAmount": 500.0, "winAmount": 600.0},
            {"brandName": "Brand A", "brandId": "b1", "betCounts": 2, "betAmount": 100.0, "winAmount": 50.0},
        ],
        "turnOverByGameAlias": [
            {"gameAlias": "aviator", "betCounts": 25, "betAmount": 700.0, "winAmount": 650.0},
            {"gameAlias": "crash-x", "betCounts": 15, "betAmount": 300.0, "winAmount": 150.0},
            {"gameAlias": "unknown-game", "betCounts": 1, "betAmount": 5.0, "winAmount": 0.0},
        ],
        "turnOverByPlayer": [
            {"externalPlayerId": "u1", "betCounts": 3, "betAmount": 50.0, "winAmount": 10.0},
            {"externalPlayerId": "u2", "betCounts": 6, "betAmount": 90.0, "winAmount": 120.0},
        ],
        "uniquePlayers": {
            "uap": 3,
            "data": [
                {"brand": "b1", "brandName": "Brand A (old)", "externalPlayerId": "u1"},
                {"brand": "b1", "brandName": "Brand A (old)", "externalPlayerId": "u2"},
                {"brand": "b1", "brandName": "Brand A (old)", "externalPlayerId": "u1"},
                {"brand": "b9", "brandName": "Ghost", "externalPlayerId": "u3"},
            ],
        },
    }


@pytest.fixture
def winners_payload() -> List[Dict[str, Any]]:
    return [
        {"externalPlayerId": "u2", "betCounts": 6, "betAmount": 90.0, "winAmount": 120.0,
         "marginInAmount": -30.0, "marginInPercentage": -33.33},
        {"externalPlayerId": "u4", "betCounts": 2, "betAmount": 10.0, "winAmount": 400.0,
         "marginInAmount": -390.0, "marginInPercentage": -3900.0},
        {"externalPlayerId": "u2", "betCounts": 1, "betAmount": 5.0, "winAmount": 6.0,
         "marginInAmount": -1.0, "marginInPercentage": -20.0},
    ]


@pytest.fixture
def contributors_payload() -> List[Dict[str, Any]]:
    return [
        {"externalPlayerId": "u1", "betCounts": 3, "betAmount": 50.0, "winAmount": 10.0,
         "marginInAmount": 40.0, "marginInPercentage": 80.0},
        {"externalPlayerId": None, "betCounts": 9, "betAmount": 300.0, "winAmount": 100.0,
         "marginInAmount": 200.0, "marginInPercentage": 66.67},
    ]
