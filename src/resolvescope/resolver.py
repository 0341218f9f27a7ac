"""Resolution orchestrator tying normalization, cache, strategies and trace together."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .cache import DEFAULT_TTL_SECONDS, CacheEntry, ResolutionCache
from .host import normalize_host
from .strategies import (
    AddressStrategy,
    ErrorKind,
    ResolutionStrategy,
    build_strategies,
    parse_strategy,
    resolve_address,
)
from .trace import TraceStep, build_trace

logger = logging.getLogger(__name__)

INVALID_INPUT_MESSAGE = "Please enter a valid URL or hostname."
GENERIC_FAILURE_MESSAGE = "Unable to resolve hostname."


@dataclass
class ResolutionOutcome:
    """Brief: Result of one Resolver.resolve() call.

    Inputs (constructor fields):
      - success: True when ip_address holds an answer.
      - from_cache: True when the answer was served from the cache.
      - input: Raw text the caller supplied.
      - host: Normalized hostname ("" when normalization failed).
      - ip_address: Resolved IPv4 address ("" on failure).
      - strategy: Upstream that was asked (or would have been).
      - error_message: Human-readable failure reason ("" on success).
      - error_kind: ErrorKind on failure, else None.
      - ttl_seconds_remaining: Seconds until the cached answer expires.
      - resolved_at: Epoch seconds of the live lookup that produced the
        answer, None on failure.
      - steps: Ordered narration of the resolution path.
    """

    success: bool
    from_cache: bool
    input: str
    host: str
    ip_address: str
    strategy: ResolutionStrategy
    error_message: str = ""
    error_kind: Optional[ErrorKind] = None
    ttl_seconds_remaining: int = 0
    resolved_at: Optional[float] = None
    steps: List[TraceStep] = field(default_factory=list)

    @property
    def strategy_label(self) -> str:
        return self.strategy.label


class Resolver:
    """Resolve hosts through a chosen strategy, caching successful answers.

    Inputs:
      - cache: Shared ResolutionCache; every Resolver handed the same
        instance sees the same entries. A private cache is created when
        omitted.
      - strategies: Mapping of ResolutionStrategy to configured
        AddressStrategy instances (defaults from build_strategies()).

    Outputs:
      - Resolver instance.

    Notes:
      - resolve() never raises; every failure is reported in the outcome.
      - Two concurrent misses for the same key both call upstream and the
        later write replaces the earlier one.

    Example:
      >>> resolver = Resolver()
      >>> outcome = resolver.resolve("http://exa mple.com", "system")
      >>> outcome.success, outcome.steps
      (False, [])
    """

    def __init__(
        self,
        cache: Optional[ResolutionCache] = None,
        strategies: Optional[Mapping[ResolutionStrategy, AddressStrategy]] = None,
    ) -> None:
        self.cache = cache if cache is not None else ResolutionCache()
        self.strategies: Dict[ResolutionStrategy, AddressStrategy] = dict(
            strategies if strategies is not None else build_strategies()
        )

    def resolve(self, raw_input: str, strategy: Any) -> ResolutionOutcome:
        """Brief: Resolve raw_input under strategy.

        Inputs:
          - raw_input: URL or hostname as typed by the user.
          - strategy: ResolutionStrategy or provider name (see parse_strategy).

        Outputs:
          - ResolutionOutcome.
        """

        chosen = parse_strategy(strategy)
        raw = raw_input if isinstance(raw_input, str) else str(raw_input or "")
        self.cache.purge_expired()

        host = normalize_host(raw)
        if not host:
            logger.debug("Rejected unparseable target %r", raw)
            return ResolutionOutcome(
                success=False,
                from_cache=False,
                input=raw,
                host="",
                ip_address="",
                strategy=chosen,
                error_message=INVALID_INPUT_MESSAGE,
                error_kind=ErrorKind.INVALID_INPUT,
            )

        cached = self.cache.get(host, chosen)
        if cached is not None:
            remaining = cached.seconds_remaining(self.cache.now())
            logger.debug(
                "Cache hit for %s via %s (%ds left)", host, chosen.value, remaining
            )
            return ResolutionOutcome(
                success=True,
                from_cache=True,
                input=raw,
                host=host,
                ip_address=cached.ip_address,
                strategy=chosen,
                ttl_seconds_remaining=remaining,
                resolved_at=cached.created_at,
                steps=build_trace(host, chosen, cache_hit=True),
            )

        logger.debug("Cache miss for %s via %s", host, chosen.value)
        steps = build_trace(host, chosen, cache_hit=False)

        ip_address, failure = resolve_address(host, chosen, self.strategies)
        if failure is not None or not ip_address:
            message = (failure.message if failure is not None else "") or GENERIC_FAILURE_MESSAGE
            kind = failure.kind if failure is not None else ErrorKind.NO_ADDRESS_RECORD
            logger.warning(
                "Resolution of %s via %s failed: %s", host, chosen.value, message
            )
            return ResolutionOutcome(
                success=False,
                from_cache=False,
                input=raw,
                host=host,
                ip_address="",
                strategy=chosen,
                error_message=message,
                error_kind=kind,
                steps=steps,
            )

        entry = CacheEntry.create(
            host,
            ip_address,
            chosen,
            now=self.cache.now(),
            ttl_seconds=DEFAULT_TTL_SECONDS,
        )
        self.cache.put(entry)
        logger.info("Resolved %s via %s -> %s", host, chosen.value, ip_address)
        return ResolutionOutcome(
            success=True,
            from_cache=False,
            input=raw,
            host=host,
            ip_address=ip_address,
            strategy=chosen,
            ttl_seconds_remaining=entry.ttl_seconds,
            resolved_at=entry.created_at,
            steps=steps,
        )

    def list_cache_entries(self) -> List[CacheEntry]:
        """Brief: Live cache entries, pruned on read."""

        return self.cache.list_live()

    def clear_cache(self) -> None:
        """Brief: Drop every cache entry."""

        removed = self.cache.clear()
        logger.info("Cleared %d resolver cache entries", removed)
