from starfall.core.cache.reference_cache import CachedReferenceDataStore

__all__ = ["CachedReferenceDataStore"]
