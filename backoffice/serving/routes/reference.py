"""
Reference Data Endpoints

Option lists for the platform/operator/brand filters and the game picker,
served from the process-wide cache.
"""

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from backoffice.cascade import HierarchySelection, with_all_option
from backoffice.container import BackOffice
from backoffice.models import FilterOption, Resource
from backoffice.serving.dependencies import get_backoffice

router = APIRouter()


class OptionsResponse(BaseModel):
    resource: str
    options: List[FilterOption]
    loading: bool
    stale: bool
    error: Optional[str] = None


class SelectionResponse(BaseModel):
    platform_id: Optional[str] = None
    operator_id: Optional[str] = None
    brand_id: Optional[str] = None


async def _fresh(backoffice: BackOffice, *resources: Resource) -> None:
    for resource in resources:
        if backoffice.cache.should_fetch(resource):
            await backoffice.cache.fetch(resource)


def _response(backoffice: BackOffice, resource: Resource, options: List[FilterOption]) -> OptionsResponse:
    entry = backoffice.cache.get_entry(resource)
    return OptionsResponse(
        resource=resource.value,
        options=options,
        loading=entry.loading,
        stale=backoffice.cache.is_stale(resource),
        error=entry.error,
    )


@router.get("/platforms", response_model=OptionsResponse)
async def list_platforms(
    wait: bool = True,
    include_all: bool = False,
    backoffice: BackOffice = Depends(get_backoffice),
) -> OptionsResponse:
    if wait:
        await _fresh(backoffice, Resource.PLATFORMS)
    else:
        backoffice.cache.ensure_fresh(Resource.PLATFORMS)
    options = backoffice.cache.get_options(Resource.PLATFORMS)
    if include_all:
        options = with_all_option(options, "All Platforms")
    return _response(backoffice, Resource.PLATFORMS, options)


@router.get("/operators", response_model=OptionsResponse)
async def list_operators(
    platform: Optional[str] = Query(default=None),
    wait: bool = True,
    backoffice: BackOffice = Depends(get_backoffice),
) -> OptionsResponse:
    if wait:
        await _fresh(backoffice, Resource.PLATFORMS, Resource.OPERATORS)
    options = backoffice.resolver.operator_options(platform)
    return _response(backoffice, Resource.OPERATORS, options)


@router.get("/brands", response_model=OptionsResponse)
async def list_brands(
    platform: Optional[str] = Query(default=None),
    operator: Optional[str] = Query(default=None),
    wait: bool = True,
    backoffice: BackOffice = Depends(get_backoffice),
) -> OptionsResponse:
    if wait:
        await _fresh(backoffice, Resource.PLATFORMS, Resource.OPERATORS, Resource.BRANDS)
    options = backoffice.resolver.brand_options(platform, operator)
    return _response(backoffice, Resource.BRANDS, options)


@router.get("/games", response_model=OptionsResponse)
async def list_games(
    wait: bool = True,
    include_all: bool = False,
    backoffice: BackOffice = Depends(get_backoffice),
) -> OptionsResponse:
    if wait:
        await _fresh(backoffice, Resource.GAMES)
    else:
        backoffice.cache.ensure_fresh(Resource.GAMES)
    options = backoffice.cache.get_options(Resource.GAMES)
    if include_all:
        options = with_all_option(options, "All Games")
    return _response(backoffice, Resource.GAMES, options)


@router.get("/selection", response_model=SelectionResponse)
async def validate_selection(
    platform: Optional[str] = Query(default=None),
    operator: Optional[str] = Query(default=None),
    brand: Optional[str] = Query(default=None),
    backoffice: BackOffice = Depends(get_backoffice),
) -> SelectionResponse:
    """Echo the selection with children that no longer fit their parents cleared."""
    selection = HierarchySelection(platform, operator, brand).validated(backoffice.resolver)
    return SelectionResponse(
        platform_id=selection.platform_id,
        operator_id=selection.operator_id,
        brand_id=selection.brand_id,
    )


@router.post("/refresh", response_model=Dict[str, OptionsResponse])
async def refresh_reference_data(backoffice: BackOffice = Depends(get_backoffice)) -> Dict[str, OptionsResponse]:
    backoffice.cache.clear_errors()
    await backoffice.cache.refresh_all()
    return {
        resource.value: _response(backoffice, resource, backoffice.cache.get_options(resource))
        for resource in Resource
    }
