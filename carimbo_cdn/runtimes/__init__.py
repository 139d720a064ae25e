from carimbo_cdn.runtimes.cache import RuntimeCache
from carimbo_cdn.runtimes.types import RuntimeBundle

__all__ = ["RuntimeBundle", "RuntimeCache"]
