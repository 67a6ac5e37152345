from .backends import KeyValueBackend, MemoryBackend, RedisBackend
from .lookup_store import LookupStore
from .realtime_cache import RealtimeLookupCache
from .veriphone import VeriphoneClient

__all__ = [
    "KeyValueBackend",
    "MemoryBackend",
    "RedisBackend",
    "LookupStore",
    "RealtimeLookupCache",
    "VeriphoneClient",
]
