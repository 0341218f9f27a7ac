from __future__ import annotations

import logging
from typing import Any, ClassVar, Dict, Optional

import requests
from pydantic import BaseModel, Field

from .base import (
    AddressStrategy,
    NoAddressRecord,
    ResolutionStrategy,
    UpstreamLookupFailed,
    strategy_aliases,
)

logger = logging.getLogger(__name__)

# Numeric RR type for A records in DNS JSON answers.
A_RECORD_TYPE = 1


class DoHStrategyConfig(BaseModel):
    """Brief: Typed configuration model for DNS-over-HTTPS JSON strategies.

    Inputs:
      - url: Optional endpoint override; the provider default is used when
        omitted.
      - timeout_ms: Optional per-request timeout in milliseconds.
      - headers: Extra HTTP headers merged over the provider defaults.

    Outputs:
      - DoHStrategyConfig instance with normalized field types.
    """

    url: Optional[str] = None
    timeout_ms: Optional[int] = Field(default=None, ge=1)
    headers: Dict[str, str] = Field(default_factory=dict)

    class Config:
        extra = "forbid"


def first_a_record(payload: Any) -> Optional[str]:
    """Brief: Return the data of the first A answer in a DNS JSON payload.

    Inputs:
      - payload: Decoded JSON body, expected to hold an "Answer" list of
        {"type": int, "data": str} objects.

    Outputs:
      - str address, or None when no answer has type 1.

    Example:
      >>> first_a_record({"Answer": [{"type": 5, "data": "x."}, {"type": 1, "data": "1.2.3.4"}]})
      '1.2.3.4'
      >>> first_a_record({"Status": 3}) is None
      True
    """

    if not isinstance(payload, dict):
        return None
    answers = payload.get("Answer")
    if not isinstance(answers, list):
        return None
    for answer in answers:
        if not isinstance(answer, dict):
            continue
        rtype = answer.get("type")
        if isinstance(rtype, bool) or rtype != A_RECORD_TYPE:
            continue
        data = answer.get("data")
        if isinstance(data, str) and data:
            return data
    return None


class DoHJsonStrategy(AddressStrategy):
    """Resolve addresses through a provider's DNS-over-HTTPS JSON API.

    The request is ``GET <url>?name=<host>&type=A``. A failed attempt is
    reported as-is; no other provider is tried.
    """

    default_url: ClassVar[str] = ""
    default_headers: ClassVar[Dict[str, str]] = {}

    @classmethod
    def get_config_model(cls):
        return DoHStrategyConfig

    def __init__(self, **config: Any) -> None:
        super().__init__(**config)
        self.url = str(self.config.get("url") or self.default_url)
        self.timeout = self._timeout_seconds(self.config.get("timeout_ms"))
        self.headers: Dict[str, str] = {
            **self.default_headers,
            **(self.config.get("headers") or {}),
        }

    def lookup(self, host: str) -> str:
        try:
            resp = requests.get(
                self.url,
                params={"name": host, "type": "A"},
                headers=self.headers,
                timeout=self.timeout,
            )
            resp.raise_for_status()
            payload = resp.json()
        except (requests.RequestException, ValueError) as exc:
            logger.debug("DoH request to %s for %s failed: %s", self.url, host, exc)
            raise UpstreamLookupFailed(f"DoH lookup failed: {exc}") from exc

        address = first_a_record(payload)
        if address is None:
            raise NoAddressRecord("No A record in DNS response.")
        return address


@strategy_aliases("google", "provider_a")
class GoogleDoHStrategy(DoHJsonStrategy):
    """Google Public DNS JSON API (dns.google)."""

    strategy = ResolutionStrategy.GOOGLE
    default_url = "https://dns.google/resolve"


@strategy_aliases("cloudflare", "provider_b")
class CloudflareDoHStrategy(DoHJsonStrategy):
    """Cloudflare DNS JSON API; the endpoint insists on the dns-json Accept header."""

    strategy = ResolutionStrategy.CLOUDFLARE
    default_url = "https://cloudflare-dns.com/dns-query"
    default_headers = {"Accept": "application/dns-json"}
