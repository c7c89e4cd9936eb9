"""
Unit Tests - Cascading Resolver
"""
import pytest

from backoffice.cache.reference import ReferenceDataCache
from backoffice.cascade import CascadingResolver, HierarchySelection, with_all_option
from backoffice.models import Resource


class TestCascadingResolver:
    """Tests for option derivation from the cached hierarchy"""

    @pytest.mark.asyncio
    async def test_operators_filtered_by_platform(self, fetcher, clock):
        cache = ReferenceDataCache(fetcher, clock=clock)
        await cache.refresh_all()
        resolver = CascadingResolver(cache)

        options = resolver.operator_options("p1")

        assert [o.id for o in options] == ["o1", "o2"]
        assert all(o.platform_id == "p1" for o in resolver.operators_for("p1"))

    @pytest.mark.asyncio
    async def test_no_platform_means_no_operators(self, fetcher, clock):
        cache = ReferenceDataCache(fetcher, clock=clock)
        await cache.refresh_all()
        resolver = CascadingResolver(cache)

        assert resolver.operator_options(None) == []
        assert resolver.operator_options("missing") == []

    @pytest.mark.asyncio
    async def test_brands_need_both_ancestors(self, fetcher, clock):
        cache = ReferenceDataCache(fetcher, clock=clock)
        await cache.refresh_all()
        resolver = CascadingResolver(cache)

        assert resolver.brand_options("p1", None) == []
        assert [o.id for o in resolver.brand_options("p1", "o1")] == ["b1"]
        # operator o3 belongs to p2
        assert resolver.brand_options("p1", "o3") == []

    @pytest.mark.asyncio
    async def test_platform_change_invalidates_operator(self, fetcher, clock):
        cache = ReferenceDataCache(fetcher, clock=clock)
        await cache.refresh_all()
        resolver = CascadingResolver(cache)

        assert resolver.is_valid_operator("p1", "o1")
        assert not resolver.is_valid_operator("p2", "o1")
        assert resolver.resolve_operator("p2", "o1") is None

    @pytest.mark.asyncio
    async def test_operator_needs_cached_platform(self, fetcher, clock):
        cache = ReferenceDataCache(fetcher, clock=clock)
        await cache.fetch(Resource.OPERATORS)
        fetcher.release.clear()
        resolver = CascadingResolver(cache)

        assert resolver.operator_options("p1") == []

        fetcher.release.set()
        await cache.fetch(Resource.PLATFORMS)
        assert [o.id for o in resolver.operator_options("p1")] == ["o1", "o2"]

    @pytest.mark.asyncio
    async def test_stale_list_triggers_background_fetch(self, fetcher, clock):
        cache = ReferenceDataCache(fetcher, clock=clock)
        resolver = CascadingResolver(cache)

        assert resolver.operator_options("p1") == []
        assert cache.is_loading(Resource.OPERATORS)
        assert cache.is_loading(Resource.PLATFORMS)

        await cache.fetch(Resource.OPERATORS)
        await cache.fetch(Resource.PLATFORMS)

        assert fetcher.calls[Resource.OPERATORS] == 1
        assert [o.id for o in resolver.operator_options("p1")] == ["o1", "o2"]

    @pytest.mark.asyncio
    async def test_brands_by_operator(self, fetcher, clock):
        cache = ReferenceDataCache(fetcher, clock=clock)
        await cache.refresh_all()
        resolver = CascadingResolver(cache)

        assert [b.id for b in resolver.brands_by_operator("o2")] == ["b2"]

    def test_with_all_option(self):
        options = with_all_option([], "All Brands")

        assert options[0].id == "ALL"
        assert options[0].label == "All Brands"


class TestHierarchySelection:
    """Tests for selection reset transitions"""

    @pytest.mark.asyncio
    async def test_platform_change_clears_children(self, fetcher, clock):
        cache = ReferenceDataCache(fetcher, clock=clock)
        await cache.refresh_all()
        resolver = CascadingResolver(cache)
        selection = HierarchySelection("p1", "o1", "b1").validated(resolver)
        assert selection == HierarchySelection("p1", "o1", "b1")

        changed = selection.with_platform("p2", resolver)

        assert changed == HierarchySelection("p2", None, None)

    @pytest.mark.asyncio
    async def test_operator_change_clears_brand(self, fetcher, clock):
        cache = ReferenceDataCache(fetcher, clock=clock)
        await cache.refresh_all()
        resolver = CascadingResolver(cache)
        selection = HierarchySelection("p1", "o1", "b1")

        changed = selection.with_operator("o2", resolver)

        assert changed == HierarchySelection("p1", "o2", None)
        assert changed.with_brand("b2", resolver).brand_id == "b2"

    @pytest.mark.asyncio
    async def test_invalid_brand_is_rejected(self, fetcher, clock):
        cache = ReferenceDataCache(fetcher, clock=clock)
        await cache.refresh_all()
        resolver = CascadingResolver(cache)

        selection = HierarchySelection("p1", "o1").with_brand("b3", resolver)

        assert selection.brand_id is None

    @pytest.mark.asyncio
    async def test_same_platform_is_unchanged(self, fetcher, clock):
        cache = ReferenceDataCache(fetcher, clock=clock)
        await cache.refresh_all()
        resolver = CascadingResolver(cache)
        selection = HierarchySelection("p1", "o1", "b1")

        assert selection.with_platform("p1", resolver) is selection
