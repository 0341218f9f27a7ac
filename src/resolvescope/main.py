from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional, TextIO

from .cache import ResolutionCache
from .config.config_parser import get_webserver_settings, load_config
from .config.logging_config import init_logging
from .resolver import ResolutionOutcome, Resolver
from .strategies import ResolutionStrategy, build_strategies, parse_strategy
from .webserver import start_webserver


def format_outcome(outcome: ResolutionOutcome) -> str:
    """Brief: Render an outcome as plain text for the terminal.

    Inputs:
      - outcome: ResolutionOutcome from Resolver.resolve().

    Outputs:
      - Multi-line string: summary lines followed by the numbered trace.
    """

    lines = [f"Input:    {outcome.input}"]
    if not outcome.success:
        if outcome.host:
            lines.append(f"Host:     {outcome.host}")
        lines.append(f"Error:    {outcome.error_message}")
    else:
        source = "Resolver cache hit" if outcome.from_cache else "Live recursive lookup"
        lines.extend(
            [
                f"Host:     {outcome.host}",
                f"Address:  {outcome.ip_address}",
                f"Provider: {outcome.strategy_label}",
                f"Source:   {source}",
                f"TTL:      {outcome.ttl_seconds_remaining} seconds",
            ]
        )
    if outcome.steps:
        lines.append("Recursive trace:")
        for idx, step in enumerate(outcome.steps, start=1):
            lines.append(f"  {idx}. {step.stage} [{step.server}] {step.detail}")
    return "\n".join(lines)


def main(argv: List[str] | None = None, out: Optional[TextIO] = None) -> int:
    """
    Main entry point for resolvescope.
    Parses arguments, loads configuration and either performs a single
    resolution or serves the HTTP API until interrupted.

    Args:
        argv: Command-line arguments.
        out: Stream for CLI output (defaults to stdout).

    Returns:
        An exit code.

    Example use:
        CLI:
            resolvescope --config config.yaml
            resolvescope --resolve https://example.com/ --provider cloudflare
    """
    stream = out or sys.stdout
    parser = argparse.ArgumentParser(
        description="Caching name resolver with a narrated recursive trace"
    )
    parser.add_argument("--config", default=None, help="Path to YAML config")
    parser.add_argument(
        "--resolve",
        metavar="TARGET",
        default=None,
        help="Resolve a single URL or hostname, print the trace and exit",
    )
    parser.add_argument(
        "--provider",
        default=ResolutionStrategy.SYSTEM.value,
        help="Recursive resolver to use: system (isp), google or cloudflare",
    )
    args = parser.parse_args(argv)

    try:
        cfg = load_config(args.config)
        strategy = parse_strategy(args.provider, default=None)
        strategies = build_strategies(cfg.get("upstream"))
    except (OSError, ValueError, KeyError) as exc:
        print(str(exc), file=stream)
        return 1

    init_logging(cfg.get("logging"))
    logger = logging.getLogger("resolvescope.main")
    if args.config:
        logger.info("Loaded config from %s", args.config)

    resolver = Resolver(cache=ResolutionCache(), strategies=strategies)

    if args.resolve is not None:
        outcome = resolver.resolve(args.resolve, strategy)
        print(format_outcome(outcome), file=stream)
        return 0 if outcome.success else 1

    enabled, host, port = get_webserver_settings(cfg)
    if not enabled:
        logger.error("webserver.enabled is false and no --resolve target given")
        return 1

    handle = start_webserver(resolver, host, port)
    try:
        while handle.is_running():
            handle.join(timeout=1.0)
    except KeyboardInterrupt:
        logger.info("Interrupted; shutting down")
        handle.stop()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())  # pragma: no cover
