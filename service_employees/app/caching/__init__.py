"""
Employees caching package.

Holds the single cached value of the service, the full employee
collection. Invalidation is explicit: a periodic sweep and eviction after
every confirmed write.
"""

from .collection_cache import CacheEntry, CollectionCache

__all__ = ["CacheEntry", "CollectionCache"]
