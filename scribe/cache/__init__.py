from .content_cache import CacheEntry, ContentCache, StoreResult

__all__ = ["CacheEntry", "ContentCache", "StoreResult"]
