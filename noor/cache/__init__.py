"""Redis cache layer"""

from .redis_cache import RedisCache, make_cache_key

__all__ = ['RedisCache', 'make_cache_key']
