from .models import CacheConfig
from .component import CacheStore, DictCacheStore, RedisCacheStore

__all__ = [
    "CacheConfig",
    "CacheStore",
    "DictCacheStore",
    "RedisCacheStore"
]
