"""
API Management Endpoints

CRUD for API-permission entries (which roles and tenants may call which
back-office endpoint).
"""

from typing import Any, Dict, List, Optional

from backoffice.api.client import ApiClient
from backoffice.models import ApiPermission, ApiPermissionPage

BASE_PATH = "/apiManagement"


class ApiManagementApi:
    """
    Client for ``/apiManagement``.

    Example:
        api = ApiManagementApi(client)
        page = await api.list(page=1, limit=50, status=True)
        await api.toggle_status(page.data[0].id)
    """

    def __init__(self, client: ApiClient):
        self.client = client

    @staticmethod
    def _entry(payload: Any) -> ApiPermission:
        if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
            payload = payload["data"]
        return ApiPermission.model_validate(payload)

    async def list(
        self,
        page: int = 1,
        limit: int = 50,
        search: Optional[str] = None,
        status: Optional[bool] = None,
        role: Optional[str] = None,
    ) -> ApiPermissionPage:
        params: Dict[str, Any] = {"page": page, "limit": limit, "search": search, "role": role}
        if status is not None:
            params["status"] = "true" if status else "false"

        payload = await self.client.get(f"{BASE_PATH}/get", params=params)

        # older deployments return a bare array
        if isinstance(payload, list):
            return ApiPermissionPage(
                data=[ApiPermission.model_validate(item) for item in payload],
                total_items=len(payload),
                limit=limit,
                page=page,
                total_pages=1,
                more_pages=False,
            )
        return ApiPermissionPage.model_validate(payload)

    async def get(self, entry_id: str) -> ApiPermission:
        return self._entry(await self.client.get(f"{BASE_PATH}/get/{entry_id}"))

    async def create(self, data: Dict[str, Any]) -> ApiPermission:
        return self._entry(await self.client.post(f"{BASE_PATH}/create", data))

    async def update(self, entry_id: str, data: Dict[str, Any]) -> ApiPermission:
        return self._entry(await self.client.put(f"{BASE_PATH}/update", {"id": entry_id, **data}))

    async def delete(self, entry_id: str) -> None:
        await self.client.delete(f"{BASE_PATH}/delete/{entry_id}")

    async def toggle_status(self, entry_id: str) -> ApiPermission:
        return self._entry(await self.client.patch(f"{BASE_PATH}/toggle-status/{entry_id}"))

    async def bulk_update(self, entry_ids: List[str], updates: Dict[str, Any]) -> Any:
        return await self.client.put(f"{BASE_PATH}/bulk-update", {"ids": entry_ids, "updates": updates})

    async def export(self, status: Optional[bool] = None, role: Optional[str] = None) -> Any:
        params: Dict[str, Any] = {"role": role}
        if status is not None:
            params["status"] = "true" if status else "false"
        return await self.client.get(f"{BASE_PATH}/export", params=params)
