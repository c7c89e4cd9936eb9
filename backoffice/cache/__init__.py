"""
Reference data cache
"""
from .reference import CacheEntry, ReferenceDataCache, build_options

__all__ = [
    "CacheEntry",
    "ReferenceDataCache",
    "build_options",
]
