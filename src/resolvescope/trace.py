from __future__ import annotations

from dataclasses import dataclass
from typing import List

from .host import top_level_domain
from .strategies.base import ResolutionStrategy

STUB_RESOLVER = "Stub Resolver"
RECURSIVE_RESOLVER = "Recursive Resolver"
ROOT_NAME_SERVER = "Root Name Server"
TLD_NAME_SERVER = "TLD Name Server"
AUTHORITATIVE_NAME_SERVER = "Authoritative Name Server"

ROOT_SERVER = "a.root-servers.net"
GTLD_SERVER = "a.gtld-servers.net"
_GTLDS = frozenset({"com", "net", "org"})


@dataclass(frozen=True)
class TraceStep:
    """Brief: One narrated hop of the conceptual resolution path.

    Inputs (constructor fields):
      - stage: Resolver role, e.g. "Root Name Server".
      - server: Server that plays the role for this lookup.
      - detail: Sentence describing what happens at this hop.
    """

    stage: str
    server: str
    detail: str


def tld_server(host: str) -> str:
    """Brief: TLD server label for host.

    Example:
      >>> tld_server("example.com")
      'a.gtld-servers.net'
      >>> tld_server("example.io")
      'io.tld-servers.example'
    """

    tld = top_level_domain(host)
    if tld in _GTLDS:
        return GTLD_SERVER
    return f"{tld}.tld-servers.example"


def authoritative_server(host: str) -> str:
    """Brief: Authoritative server label built from the last two labels of host.

    Example:
      >>> authoritative_server("www.example.com")
      'ns1.example.com'
      >>> authoritative_server("localhost")
      'ns1.localhost'
    """

    labels = host.split(".")
    if len(labels) >= 2:
        return f"ns1.{labels[-2]}.{labels[-1]}"
    return f"ns1.{host}"


def build_trace(
    host: str, strategy: ResolutionStrategy, cache_hit: bool
) -> List[TraceStep]:
    """Brief: Narrate the resolution path for host under strategy.

    Inputs:
      - host: Normalized hostname.
      - strategy: Recursive resolver in use.
      - cache_hit: Whether the recursive resolver answered from its cache.

    Outputs:
      - List of 2 steps on a cache hit, otherwise 5 steps in the order
        stub, recursive, root, TLD, authoritative.

    Notes:
      - Pure: no network I/O, same inputs give the same steps.
    """

    steps = [
        TraceStep(
            STUB_RESOLVER,
            "localhost",
            "Operating system stub resolver forwards query to recursive resolver.",
        )
    ]
    if cache_hit:
        steps.append(
            TraceStep(
                RECURSIVE_RESOLVER,
                strategy.server,
                "Cache hit in resolver. Returning cached IP without full recursion.",
            )
        )
        return steps

    steps.extend(
        [
            TraceStep(
                RECURSIVE_RESOLVER,
                strategy.server,
                "Cache miss. Starting recursive lookup.",
            ),
            TraceStep(
                ROOT_NAME_SERVER,
                ROOT_SERVER,
                "Resolver asks root where to find the TLD name servers.",
            ),
            TraceStep(
                TLD_NAME_SERVER,
                tld_server(host),
                "Resolver asks TLD server for authoritative name servers.",
            ),
            TraceStep(
                AUTHORITATIVE_NAME_SERVER,
                authoritative_server(host),
                "Resolver asks authoritative server for final A record.",
            ),
        ]
    )
    return steps
