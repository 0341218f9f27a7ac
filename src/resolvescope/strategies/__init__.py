"""Upstream resolution strategies (system resolver and DoH JSON providers)."""

from .base import (
    AddressStrategy,
    ErrorKind,
    LookupFailure,
    NoAddressRecord,
    ResolutionStrategy,
    SystemLookupFailed,
    UpstreamLookupFailed,
    parse_strategy,
    strategy_aliases,
)
from .registry import build_strategies, discover_strategies, resolve_address

__all__ = [
    "AddressStrategy",
    "ErrorKind",
    "LookupFailure",
    "NoAddressRecord",
    "ResolutionStrategy",
    "SystemLookupFailed",
    "UpstreamLookupFailed",
    "build_strategies",
    "discover_strategies",
    "parse_strategy",
    "resolve_address",
    "strategy_aliases",
]
