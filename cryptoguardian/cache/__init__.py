"""Cache implementations package."""

from cryptoguardian.cache.memory import MemoryCacheBackend
from cryptoguardian.cache.redis import RedisCacheBackend

__all__ = [
    "MemoryCacheBackend",
    "RedisCacheBackend",
]
