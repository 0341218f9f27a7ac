from __future__ import annotations

import enum
from typing import Any, ClassVar, Dict, Optional, Type


class ResolutionStrategy(str, enum.Enum):
    """Brief: Upstream recursive resolver selected per request.

    Members:
      - SYSTEM: the host's own stub/ISP resolver (getent).
      - GOOGLE: Google Public DNS JSON API (provider A).
      - CLOUDFLARE: Cloudflare DNS JSON API (provider B).
    """

    SYSTEM = "system"
    GOOGLE = "google"
    CLOUDFLARE = "cloudflare"

    @property
    def label(self) -> str:
        """Brief: Human-readable provider name."""

        return _LABELS[self]

    @property
    def server(self) -> str:
        """Brief: Server description used for the recursive resolver trace step."""

        return _SERVERS[self]


_LABELS: Dict[ResolutionStrategy, str] = {
    ResolutionStrategy.SYSTEM: "ISP Recursive Resolver",
    ResolutionStrategy.GOOGLE: "Google Public DNS",
    ResolutionStrategy.CLOUDFLARE: "Cloudflare DNS",
}

_SERVERS: Dict[ResolutionStrategy, str] = {
    ResolutionStrategy.SYSTEM: "ISP/System Resolver",
    ResolutionStrategy.GOOGLE: "8.8.8.8 (DoH: dns.google)",
    ResolutionStrategy.CLOUDFLARE: "1.1.1.1 (DoH: cloudflare-dns.com)",
}

_ALIASES: Dict[str, ResolutionStrategy] = {
    "system": ResolutionStrategy.SYSTEM,
    "isp": ResolutionStrategy.SYSTEM,
    "google": ResolutionStrategy.GOOGLE,
    "providera": ResolutionStrategy.GOOGLE,
    "cloudflare": ResolutionStrategy.CLOUDFLARE,
    "providerb": ResolutionStrategy.CLOUDFLARE,
}


def parse_strategy(
    raw: Any, default: Optional[ResolutionStrategy] = ResolutionStrategy.SYSTEM
) -> ResolutionStrategy:
    """Brief: Map free-text provider names onto a ResolutionStrategy.

    Inputs:
      - raw: ResolutionStrategy instance or provider name such as "isp",
        "Google" or "provider_b". Case, dashes and underscores are ignored.
      - default: Strategy returned for unknown names. When None, unknown
        names raise ValueError instead.

    Outputs:
      - ResolutionStrategy member.

    Example:
      >>> parse_strategy("Cloudflare")
      <ResolutionStrategy.CLOUDFLARE: 'cloudflare'>
      >>> parse_strategy("bogus")
      <ResolutionStrategy.SYSTEM: 'system'>
    """

    if isinstance(raw, ResolutionStrategy):
        return raw
    key = str(raw or "").strip().lower().replace("-", "").replace("_", "")
    found = _ALIASES.get(key)
    if found is not None:
        return found
    if default is None:
        raise ValueError(
            f"Unknown resolution strategy {raw!r}. "
            f"Known names: {', '.join(sorted(_ALIASES))}"
        )
    return default


class ErrorKind(str, enum.Enum):
    """Brief: Why a resolution did not produce an address."""

    INVALID_INPUT = "InvalidInput"
    NO_ADDRESS_RECORD = "NoAddressRecord"
    UPSTREAM_LOOKUP_FAILED = "UpstreamLookupFailed"
    SYSTEM_LOOKUP_FAILED = "SystemLookupFailed"


class LookupFailure(Exception):
    """
    Brief: An upstream strategy could not map a host to an address.

    Inputs:
    - message: Human-readable description suitable for end users

    Outputs:
    - Exception instance exposing ``kind`` and ``message``
    """

    kind: ClassVar[ErrorKind] = ErrorKind.UPSTREAM_LOOKUP_FAILED

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NoAddressRecord(LookupFailure):
    """Upstream answered but carried no usable A record."""

    kind = ErrorKind.NO_ADDRESS_RECORD


class UpstreamLookupFailed(LookupFailure):
    """Transport, HTTP or decoding error talking to a DoH endpoint."""

    kind = ErrorKind.UPSTREAM_LOOKUP_FAILED


class SystemLookupFailed(LookupFailure):
    """The local lookup facility exited non-zero or could not be run."""

    kind = ErrorKind.SYSTEM_LOOKUP_FAILED


def strategy_aliases(*aliases: str):
    """Brief: Decorator to set aliases on a strategy class for discovery.

    Inputs:
      - *aliases: Variable number of alias strings.

    Outputs:
      - Callable that applies the aliases to an AddressStrategy subclass and
        returns it.

    Example:
      >>> @strategy_aliases("isp", "system")
      ... class Local(AddressStrategy):
      ...     pass
      >>> Local.aliases
      ('isp', 'system')
    """

    def _wrap(cls: type) -> type:
        cls.aliases = tuple(aliases)
        return cls

    return _wrap


class AddressStrategy:
    """Base class for upstream address lookups.

    Brief:
      An AddressStrategy resolves a hostname to a single IPv4 address or
      raises a LookupFailure subclass explaining why not. Strategies know
      nothing about caching or trace narration.

    Inputs:
      - **config: Implementation-specific configuration mapping.

    Outputs:
      - AddressStrategy instance.
    """

    strategy: ClassVar[ResolutionStrategy]
    aliases: tuple[str, ...] = ()
    # Failure type used when an implementation raises something unexpected.
    failure_class: ClassVar[Type[LookupFailure]] = UpstreamLookupFailed

    @classmethod
    def get_config_model(cls):
        """Brief: Return the pydantic model validating this strategy's config.

        Outputs:
          - Model class, or None when config is accepted as-is.
        """

        return None

    def __init__(self, **config: Any) -> None:
        self.config: Dict[str, Any] = dict(config)

    @staticmethod
    def _timeout_seconds(timeout_ms: Any) -> Optional[float]:
        """Brief: Convert an optional millisecond timeout to seconds."""

        if timeout_ms is None:
            return None
        return max(1, int(timeout_ms)) / 1000.0

    def lookup(self, host: str) -> str:
        """Brief: Resolve host to an IPv4 address string.

        Inputs:
          - host: Normalized hostname.

        Outputs:
          - str: IPv4 address.

        Raises:
          - LookupFailure subclass when no address can be produced.
        """

        raise NotImplementedError(
            "AddressStrategy.lookup() must be implemented by a subclass"
        )
