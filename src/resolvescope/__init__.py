"""resolvescope package"""

from .cache import CacheEntry, ResolutionCache
from .resolver import ResolutionOutcome, Resolver
from .strategies import ErrorKind, ResolutionStrategy
from .trace import TraceStep

__all__ = [
    "CacheEntry",
    "ErrorKind",
    "ResolutionCache",
    "ResolutionOutcome",
    "ResolutionStrategy",
    "Resolver",
    "TraceStep",
]
