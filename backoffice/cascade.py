"""
Cascading Resolver

Derives operator and brand option lists from the cached hierarchy for a
selected platform (and operator), and reports whether a child selection is
still valid under its parents. Selection state itself lives in
``HierarchySelection``, owned by the caller.
"""

from dataclasses import dataclass, replace
from typing import List, Optional

from backoffice.cache.reference import ReferenceDataCache, build_options
from backoffice.models import Brand, FilterOption, Operator, Resource

ALL_OPTION_ID = "ALL"


def with_all_option(options: List[FilterOption], label: str = "All") -> List[FilterOption]:
    """Prefix ``options`` with a catch-all entry."""
    return [FilterOption(id=ALL_OPTION_ID, label=label, value=ALL_OPTION_ID)] + list(options)


class CascadingResolver:
    """
    Reads from the cache only. A stale operator or brand list triggers a
    background fetch and the current (possibly old) list is returned, so
    callers should expect a second read with fresher data.
    """

    def __init__(self, cache: ReferenceDataCache):
        self.cache = cache

    def _platform_known(self, platform_id: str) -> bool:
        return any(p.id == platform_id for p in self.cache.get_entities(Resource.PLATFORMS))

    def _operator(self, operator_id: str) -> Optional[Operator]:
        for operator in self.cache.get_entities(Resource.OPERATORS):
            if operator.id == operator_id:
                return operator
        return None

    def operators_for(self, platform_id: Optional[str]) -> List[Operator]:
        self.cache.ensure_fresh(Resource.PLATFORMS)
        self.cache.ensure_fresh(Resource.OPERATORS)
        if not platform_id or not self._platform_known(platform_id):
            return []
        return [o for o in self.cache.get_entities(Resource.OPERATORS) if o.platform_id == platform_id]

    def brands_for(self, platform_id: Optional[str], operator_id: Optional[str]) -> List[Brand]:
        self.cache.ensure_fresh(Resource.BRANDS)
        if not platform_id or not operator_id or not self.is_valid_operator(platform_id, operator_id):
            return []
        return [
            b for b in self.cache.get_entities(Resource.BRANDS)
            if b.platform_id == platform_id and b.operator_id == operator_id
        ]

    def operator_options(self, platform_id: Optional[str]) -> List[FilterOption]:
        return list(build_options(self.operators_for(platform_id)))

    def brand_options(self, platform_id: Optional[str], operator_id: Optional[str]) -> List[FilterOption]:
        return list(build_options(self.brands_for(platform_id, operator_id)))

    def brands_by_operator(self, operator_id: str) -> List[Brand]:
        return [b for b in self.cache.get_entities(Resource.BRANDS) if b.operator_id == operator_id]

    def is_valid_operator(self, platform_id: Optional[str], operator_id: Optional[str]) -> bool:
        if not platform_id or not operator_id or not self._platform_known(platform_id):
            return False
        operator = self._operator(operator_id)
        return operator is not None and operator.platform_id == platform_id

    def is_valid_brand(
        self,
        platform_id: Optional[str],
        operator_id: Optional[str],
        brand_id: Optional[str],
    ) -> bool:
        if not brand_id or not self.is_valid_operator(platform_id, operator_id):
            return False
        return any(
            b.id == brand_id and b.platform_id == platform_id and b.operator_id == operator_id
            for b in self.cache.get_entities(Resource.BRANDS)
        )

    def resolve_operator(self, platform_id: Optional[str], operator_id: Optional[str]) -> Optional[str]:
        return operator_id if self.is_valid_operator(platform_id, operator_id) else None

    def resolve_brand(
        self,
        platform_id: Optional[str],
        operator_id: Optional[str],
        brand_id: Optional[str],
    ) -> Optional[str]:
        return brand_id if self.is_valid_brand(platform_id, operator_id, brand_id) else None


@dataclass(frozen=True)
class HierarchySelection:
    """
    Platform -> operator -> brand selection with reset transitions.

    Each transition returns a new selection in which any child no longer
    valid under its parents is cleared.
    """
    platform_id: Optional[str] = None
    operator_id: Optional[str] = None
    brand_id: Optional[str] = None

    def validated(self, resolver: CascadingResolver) -> "HierarchySelection":
        operator_id = resolver.resolve_operator(self.platform_id, self.operator_id)
        brand_id = resolver.resolve_brand(self.platform_id, operator_id, self.brand_id)
        return HierarchySelection(self.platform_id, operator_id, brand_id)

    def with_platform(self, platform_id: Optional[str], resolver: CascadingResolver) -> "HierarchySelection":
        if platform_id == self.platform_id:
            return self
        return replace(self, platform_id=platform_id).validated(resolver)

    def with_operator(self, operator_id: Optional[str], resolver: CascadingResolver) -> "HierarchySelection":
        if operator_id == self.operator_id:
            return self
        return replace(self, operator_id=operator_id).validated(resolver)

    def with_brand(self, brand_id: Optional[str], resolver: CascadingResolver) -> "HierarchySelection":
        return replace(self, brand_id=brand_id).validated(resolver)
