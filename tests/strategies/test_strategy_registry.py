"""
Brief: Tests for strategy discovery, config validation, parsing and resolve_address.

Inputs:
  - None

Outputs:
  - None
"""

import pytest

from conftest import FakeStrategy
from resolvescope.strategies import (
    ErrorKind,
    ResolutionStrategy,
    SystemLookupFailed,
    UpstreamLookupFailed,
    build_strategies,
    discover_strategies,
    parse_strategy,
    resolve_address,
)
from resolvescope.strategies.doh import (
    CloudflareDoHStrategy,
    DoHJsonStrategy,
    GoogleDoHStrategy,
)
from resolvescope.strategies.system import SystemResolverStrategy


def test_discover_strategies_registers_aliases():
    """
    Brief: Every concrete strategy is reachable by value and alias.

    Inputs:
      - default package scan

    Outputs:
      - None: Asserts alias -> class mapping
    """
    reg = discover_strategies()
    assert reg["system"] is SystemResolverStrategy
    assert reg["isp"] is SystemResolverStrategy
    assert reg["google"] is GoogleDoHStrategy
    assert reg["provider_a"] is GoogleDoHStrategy
    assert reg["cloudflare"] is CloudflareDoHStrategy
    assert reg["provider_b"] is CloudflareDoHStrategy
    assert DoHJsonStrategy not in reg.values()


def test_build_strategies_applies_shared_timeout():
    """
    Brief: upstream.timeout_ms is inherited unless a strategy sets its own.

    Inputs:
      - shared timeout plus a per-strategy override

    Outputs:
      - None: Asserts converted timeouts per instance
    """
    strategies = build_strategies(
        {"timeout_ms": 2000, "google": {"timeout_ms": 500}}
    )
    assert set(strategies) == set(ResolutionStrategy)
    assert strategies[ResolutionStrategy.SYSTEM].timeout == 2.0
    assert strategies[ResolutionStrategy.GOOGLE].timeout == 0.5
    assert strategies[ResolutionStrategy.CLOUDFLARE].timeout == 2.0


def test_build_strategies_defaults_without_config():
    """
    Brief: No config yields provider defaults and no timeout.

    Inputs:
      - None

    Outputs:
      - None: Asserts default URLs and command
    """
    strategies = build_strategies(None)
    assert strategies[ResolutionStrategy.GOOGLE].url == "https://dns.google/resolve"
    assert (
        strategies[ResolutionStrategy.CLOUDFLARE].url
        == "https://cloudflare-dns.com/dns-query"
    )
    assert strategies[ResolutionStrategy.SYSTEM].command == ["getent", "ahostsv4"]
    assert strategies[ResolutionStrategy.SYSTEM].timeout is None


def test_build_strategies_rejects_unknown_keys():
    """
    Brief: The pydantic model for a strategy forbids unknown fields.

    Inputs:
      - google section with a typo

    Outputs:
      - None: Asserts ValueError naming the strategy class
    """
    with pytest.raises(ValueError) as ei:
        build_strategies({"google": {"ulr": "https://x"}})
    assert "GoogleDoHStrategy" in str(ei.value)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("isp", ResolutionStrategy.SYSTEM),
        ("System", ResolutionStrategy.SYSTEM),
        ("google", ResolutionStrategy.GOOGLE),
        ("providerA", ResolutionStrategy.GOOGLE),
        ("CLOUDFLARE", ResolutionStrategy.CLOUDFLARE),
        ("provider_b", ResolutionStrategy.CLOUDFLARE),
        (ResolutionStrategy.GOOGLE, ResolutionStrategy.GOOGLE),
        ("", ResolutionStrategy.SYSTEM),
        ("quad9", ResolutionStrategy.SYSTEM),
    ],
)
def test_parse_strategy(raw, expected):
    """
    Brief: Provider names map case-insensitively; unknown names fall back to system.

    Inputs:
      - raw provider text

    Outputs:
      - None: Asserts strategy
    """
    assert parse_strategy(raw) is expected


def test_parse_strategy_strict():
    """
    Brief: default=None turns unknown names into ValueError.

    Inputs:
      - "quad9"

    Outputs:
      - None: Asserts ValueError
    """
    with pytest.raises(ValueError):
        parse_strategy("quad9", default=None)


def test_strategy_labels():
    """
    Brief: Each strategy exposes a display label and server label.

    Inputs:
      - enum members

    Outputs:
      - None: Asserts labels
    """
    assert ResolutionStrategy.SYSTEM.label == "ISP Recursive Resolver"
    assert ResolutionStrategy.GOOGLE.label == "Google Public DNS"
    assert ResolutionStrategy.CLOUDFLARE.server == "1.1.1.1 (DoH: cloudflare-dns.com)"


def test_resolve_address_success_and_failure():
    """
    Brief: resolve_address returns (ip, None) or ("", failure) without raising.

    Inputs:
      - fake strategies answering, failing, and raising unexpectedly

    Outputs:
      - None: Asserts tuple contents
    """
    strategies = {
        ResolutionStrategy.SYSTEM: FakeStrategy(
            {"ok.example": "10.0.0.1", "bad.example": SystemLookupFailed("nope")}
        ),
        ResolutionStrategy.GOOGLE: FakeStrategy({"boom.example": RuntimeError("boom")}),
        ResolutionStrategy.CLOUDFLARE: FakeStrategy(),
    }
    assert resolve_address("ok.example", ResolutionStrategy.SYSTEM, strategies) == (
        "10.0.0.1",
        None,
    )

    ip, err = resolve_address("bad.example", ResolutionStrategy.SYSTEM, strategies)
    assert ip == ""
    assert err.kind is ErrorKind.SYSTEM_LOOKUP_FAILED

    ip, err = resolve_address("boom.example", ResolutionStrategy.GOOGLE, strategies)
    assert ip == ""
    assert isinstance(err, UpstreamLookupFailed)
    assert "boom" in err.message


def test_resolve_address_does_not_fall_back(monkeypatch):
    """
    Brief: A failing DoH provider is not retried against another strategy.

    Inputs:
      - google failing, system able to answer

    Outputs:
      - None: Asserts system never consulted
    """
    system = FakeStrategy({"example.com": "10.0.0.1"})
    strategies = {
        ResolutionStrategy.SYSTEM: system,
        ResolutionStrategy.GOOGLE: FakeStrategy(
            {"example.com": UpstreamLookupFailed("DoH lookup failed: timeout")}
        ),
        ResolutionStrategy.CLOUDFLARE: FakeStrategy(),
    }
    ip, err = resolve_address("example.com", ResolutionStrategy.GOOGLE, strategies)
    assert ip == ""
    assert err.message == "DoH lookup failed: timeout"
    assert system.calls == []
