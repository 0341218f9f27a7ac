"""Free-text target normalization.

Brief:
  Turns whatever a user typed into the resolve box (a full URL, a bare
  hostname, something with userinfo or a port) into the canonical lower-case
  hostname used for cache keys and upstream lookups.
"""

from __future__ import annotations

import string

_ALLOWED_HOST_CHARS = frozenset(string.ascii_lowercase + string.digits + ".-")


def normalize_host(raw_input: str) -> str:
    """Brief: Normalize a raw URL or hostname to a canonical hostname.

    Inputs:
      - raw_input: Arbitrary user supplied text.

    Outputs:
      - str: Lower-case hostname, or "" when the input cannot be turned into
        one.

    Notes:
      - Only the character set is validated. Structurally odd names such as
        "a..b" pass unchanged; no label or total length checks are applied.
      - A colon at index 0 is not treated as a port separator, so ":80"
        fails the character filter instead of collapsing to an empty port.

    Example:
      >>> normalize_host("HTTPS://Example.COM/path")
      'example.com'
      >>> normalize_host("user@host.example:8080/x")
      'host.example'
      >>> normalize_host("http://exa mple.com")
      ''
    """

    value = (raw_input or "").strip()
    if not value:
        return ""

    value = value.lower()

    scheme_end = value.find("://")
    if scheme_end >= 0:
        value = value[scheme_end + 3 :]

    slash = value.find("/")
    if slash >= 0:
        value = value[:slash]

    at_sign = value.rfind("@")
    if at_sign >= 0:
        value = value[at_sign + 1 :]

    if value.endswith("."):
        value = value[:-1]

    colon = value.find(":")
    if colon > 0:
        value = value[:colon]

    if not value:
        return ""

    if any(ch not in _ALLOWED_HOST_CHARS for ch in value):
        return ""

    return value


def top_level_domain(host: str) -> str:
    """Brief: Return the last dot-separated label of host, lower-cased."""

    return host.rsplit(".", 1)[-1].lower()
