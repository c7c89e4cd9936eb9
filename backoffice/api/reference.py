"""
Reference Data Fetcher

Paginated list requests for the Platform -> Operator -> Brand hierarchy and
the operator game catalog. Returns validated entity lists; caching and
retries are the caller's concern.
"""

from typing import Any, Dict, List, Optional, Sequence

import structlog

from backoffice.api.client import ApiClient
from backoffice.models import Brand, Game, Operator, Platform, ReferenceEntity, Resource

logger = structlog.get_logger(__name__)

PLATFORM_LIST_PATH = "/platform/get"
OPERATOR_LIST_PATH = "/operator/get"
BRAND_LIST_PATH = "/brand/get"
GAME_LIST_PATH = "/operatorGame/list"


class ReferenceDataFetcher:
    """
    Remote list fetcher for the cached reference resources.

    Example:
        fetcher = ReferenceDataFetcher(client, page_size=100)
        platforms = await fetcher.list_platforms()
        operators = await fetcher.fetch(Resource.OPERATORS, {"platform_id": "p1"})
    """

    def __init__(
        self,
        client: ApiClient,
        page_size: int = 100,
        games_page_size: int = 500,
        sort_direction: int = -1,
        default_platform_id: Optional[str] = None,
    ):
        self.client = client
        self.page_size = page_size
        self.games_page_size = games_page_size
        self.sort_direction = sort_direction
        self.default_platform_id = default_platform_id

    @classmethod
    def from_settings(cls, client: ApiClient, settings) -> "ReferenceDataFetcher":
        return cls(
            client,
            page_size=settings.api.reference_page_size,
            games_page_size=settings.api.games_page_size,
            sort_direction=settings.api.sort_direction,
            default_platform_id=settings.api.default_platform_id,
        )

    def _page(self, page_no: int, page_size: Optional[int]) -> Dict[str, Any]:
        return {
            "pageNo": page_no,
            "pageSize": page_size or self.page_size,
            "sortDirection": self.sort_direction,
        }

    @staticmethod
    def _items(payload: Any, key: str) -> Sequence[Dict[str, Any]]:
        if isinstance(payload, dict):
            return payload.get(key) or []
        if isinstance(payload, list):
            return payload
        return []

    async def list_platforms(self, page_no: int = 1, page_size: Optional[int] = None) -> List[Platform]:
        payload = await self.client.get(PLATFORM_LIST_PATH, params=self._page(page_no, page_size))
        return [Platform.model_validate(item) for item in self._items(payload, "platforms")]

    async def list_operators(
        self,
        platform_id: Optional[str] = None,
        page_no: int = 1,
        page_size: Optional[int] = None,
    ) -> List[Operator]:
        params = self._page(page_no, page_size)
        params["platforms"] = platform_id or self.default_platform_id
        payload = await self.client.get(OPERATOR_LIST_PATH, params=params)
        return [Operator.model_validate(item) for item in self._items(payload, "operators")]

    async def list_brands(
        self,
        platform_id: Optional[str] = None,
        operator_id: Optional[str] = None,
        page_no: int = 1,
        page_size: Optional[int] = None,
    ) -> List[Brand]:
        params = self._page(page_no, page_size)
        params["platforms"] = platform_id or self.default_platform_id
        params["operators"] = operator_id
        payload = await self.client.get(BRAND_LIST_PATH, params=params)
        return [Brand.model_validate(item) for item in self._items(payload, "brands")]

    async def list_games(
        self,
        platform_id: Optional[str] = None,
        operator_id: Optional[str] = None,
        brand_id: Optional[str] = None,
        is_active: Optional[bool] = None,
        page_no: int = 1,
        page_size: Optional[int] = None,
    ) -> List[Game]:
        params: Dict[str, Any] = {
            "pageNo": page_no,
            "pageSize": page_size or self.games_page_size,
            "sortDirection": 1,
        }
        for name, value in (("platform", platform_id), ("operator", operator_id), ("brand", brand_id)):
            if value and value.upper() != "ALL":
                params[name] = value
        if is_active is not None:
            params["isActive"] = "true" if is_active else "false"

        payload = await self.client.get(GAME_LIST_PATH, params=params)
        return [Game.model_validate(item) for item in self._items(payload, "data")]

    async def fetch(self, resource: Resource, params: Optional[Dict[str, Any]] = None) -> List[ReferenceEntity]:
        """Dispatch a list call for ``resource`` with keyword ``params``."""
        params = params or {}
        logger.debug("Fetching reference list", resource=resource.value, params=params)

        if resource is Resource.PLATFORMS:
            return await self.list_platforms(**params)
        if resource is Resource.OPERATORS:
            return await self.list_operators(**params)
        if resource is Resource.BRANDS:
            return await self.list_brands(**params)
        if resource is Resource.GAMES:
            return await self.list_games(**params)
        raise ValueError(f"Unknown resource: {resource!r}")
