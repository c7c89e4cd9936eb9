"""
API Management Endpoints

Read access to API-permission entries plus the status toggle.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from backoffice.container import BackOffice
from backoffice.models import ApiPermission, ApiPermissionPage
from backoffice.serving.dependencies import get_backoffice

router = APIRouter()


@router.get("", response_model=ApiPermissionPage)
async def list_permissions(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=50, ge=1, le=200),
    search: Optional[str] = None,
    status: Optional[bool] = None,
    role: Optional[str] = None,
    backoffice: BackOffice = Depends(get_backoffice),
) -> ApiPermissionPage:
    backoffice.gate.require_ready()
    return await backoffice.management.list(page=page, limit=limit, search=search, status=status, role=role)


@router.get("/{entry_id}", response_model=ApiPermission)
async def get_permission(entry_id: str, backoffice: BackOffice = Depends(get_backoffice)) -> ApiPermission:
    backoffice.gate.require_ready()
    return await backoffice.management.get(entry_id)


@router.patch("/{entry_id}/toggle-status", response_model=ApiPermission)
async def toggle_permission_status(entry_id: str, backoffice: BackOffice = Depends(get_backoffice)) -> ApiPermission:
    backoffice.gate.require_ready()
    return await backoffice.management.toggle_status(entry_id)
