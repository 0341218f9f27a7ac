"""HTTP API for the resolution engine (resolve, cache listing, health).

This module provides a small FastAPI application and helpers to run it under
uvicorn in a background thread. Handlers return pydantic models; resolution
handlers are plain functions so FastAPI runs each request on its worker
thread pool against the one shared Resolver.
"""

from __future__ import annotations

import logging
import threading
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import uvicorn
from fastapi import FastAPI, HTTPException, Query, status
from pydantic import BaseModel

from .cache import CacheEntry
from .resolver import ResolutionOutcome, Resolver
from .strategies import ResolutionStrategy

logger = logging.getLogger(__name__)


class _Suppress2xxAccessFilter(logging.Filter):
    """Logging filter that drops uvicorn access records for HTTP 2xx responses.

    Example:
      >>> access_logger = logging.getLogger("uvicorn.access")
      >>> access_logger.addFilter(_Suppress2xxAccessFilter())
    """

    def filter(self, record: logging.LogRecord) -> bool:
        status_code = getattr(record, "status_code", None)
        if status_code is None:
            args = getattr(record, "args", None)
            if isinstance(args, dict):
                status_code = args.get("status_code") or args.get("status")
            elif isinstance(args, (tuple, list)) and args:
                # uvicorn passes the status code as the last positional arg
                status_code = args[-1]

        try:
            code = int(status_code)
        except (TypeError, ValueError):
            return True
        return not (200 <= code <= 299)


def install_uvicorn_2xx_suppression() -> None:
    """Attach _Suppress2xxAccessFilter to the uvicorn.access logger once."""

    access_logger = logging.getLogger("uvicorn.access")
    for f in getattr(access_logger, "filters", []):
        if isinstance(f, _Suppress2xxAccessFilter):
            return
    access_logger.addFilter(_Suppress2xxAccessFilter())


def _ts_to_utc_iso(ts: Optional[float]) -> Optional[str]:
    """Brief: Convert a Unix timestamp (seconds) to an ISO8601 UTC string.

    Example:
      >>> _ts_to_utc_iso(0)
      '1970-01-01T00:00:00Z'
    """

    if ts is None:
        return None
    dt = datetime.fromtimestamp(float(ts), tz=timezone.utc)
    return dt.isoformat().replace("+00:00", "Z")


class TraceStepModel(BaseModel):
    stage: str
    server: str
    detail: str


class ResolveRequest(BaseModel):
    """Brief: JSON body for POST /api/v1/resolve."""

    target: str = ""
    provider: str = "system"


class ResolveResponse(BaseModel):
    success: bool
    from_cache: bool
    input: str
    host: str
    ip_address: str
    strategy: str
    strategy_label: str
    error_message: str
    error_kind: Optional[str] = None
    ttl_seconds_remaining: int
    resolved_at: Optional[str] = None
    steps: List[TraceStepModel]


class CacheEntryModel(BaseModel):
    host: str
    ip_address: str
    strategy: str
    strategy_label: str
    ttl_seconds: int
    ttl_seconds_remaining: int
    created_at: str
    expires_at: str


class StrategyModel(BaseModel):
    name: str
    label: str
    server: str


def outcome_to_model(outcome: ResolutionOutcome) -> ResolveResponse:
    """Brief: Serialize a ResolutionOutcome for the HTTP API."""

    return ResolveResponse(
        success=outcome.success,
        from_cache=outcome.from_cache,
        input=outcome.input,
        host=outcome.host,
        ip_address=outcome.ip_address,
        strategy=outcome.strategy.value,
        strategy_label=outcome.strategy_label,
        error_message=outcome.error_message,
        error_kind=outcome.error_kind.value if outcome.error_kind else None,
        ttl_seconds_remaining=outcome.ttl_seconds_remaining,
        resolved_at=_ts_to_utc_iso(outcome.resolved_at),
        steps=[
            TraceStepModel(stage=s.stage, server=s.server, detail=s.detail)
            for s in outcome.steps
        ],
    )


def entry_to_model(entry: CacheEntry, now: float) -> CacheEntryModel:
    """Brief: Serialize a CacheEntry, including whole seconds left at now."""

    return CacheEntryModel(
        host=entry.host,
        ip_address=entry.ip_address,
        strategy=entry.strategy.value,
        strategy_label=entry.strategy.label,
        ttl_seconds=entry.ttl_seconds,
        ttl_seconds_remaining=entry.seconds_remaining(now),
        created_at=_ts_to_utc_iso(entry.created_at) or "",
        expires_at=_ts_to_utc_iso(entry.expires_at) or "",
    )


def create_app(resolver: Resolver) -> FastAPI:
    """Create and configure the FastAPI app exposing the resolver.

    Inputs:
      - resolver: Shared Resolver; all requests use its cache.

    Outputs:
      - FastAPI application with health, resolve, cache and strategy
        endpoints.

    Example:
      >>> app = create_app(Resolver())
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        install_uvicorn_2xx_suppression()
        yield

    app = FastAPI(title="resolvescope HTTP API", lifespan=lifespan)
    app.state.resolver = resolver

    def _resolve(target: str, provider: str) -> ResolveResponse:
        if not target.strip():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="target must not be empty",
            )
        outcome = resolver.resolve(target, provider)
        return outcome_to_model(outcome)

    @app.get("/api/v1/health")
    @app.get("/healthz")
    @app.get("/health")
    async def health() -> Dict[str, Any]:
        """Return simple liveness information."""

        return {"status": "ok"}

    @app.get("/api/v1/resolve", response_model=ResolveResponse)
    def resolve_get(
        target: str = Query(""), provider: str = Query("system")
    ) -> ResolveResponse:
        """Brief: Resolve ?target= with ?provider= (system, google, cloudflare).

        Outputs:
          - ResolveResponse; HTTP 200 even when resolution fails.
        """

        return _resolve(target, provider)

    @app.post("/api/v1/resolve", response_model=ResolveResponse)
    def resolve_post(body: ResolveRequest) -> ResolveResponse:
        return _resolve(body.target, body.provider)

    @app.get("/api/v1/cache", response_model=List[CacheEntryModel])
    def cache_entries() -> List[CacheEntryModel]:
        entries = resolver.list_cache_entries()
        now = resolver.cache.now()
        return [entry_to_model(e, now) for e in entries]

    @app.post("/api/v1/cache/clear")
    def cache_clear() -> Dict[str, Any]:
        resolver.clear_cache()
        return {"status": "ok"}

    @app.get("/api/v1/strategies", response_model=List[StrategyModel])
    async def strategies() -> List[StrategyModel]:
        return [
            StrategyModel(name=s.value, label=s.label, server=s.server)
            for s in ResolutionStrategy
        ]

    return app


class WebServerHandle:
    """Handle for a background webserver thread.

    Inputs (constructor):
      - thread: Thread object running the uvicorn server loop.
      - server: Optional uvicorn.Server instance.

    Outputs:
      - WebServerHandle instance with stop() and is_running().
    """

    def __init__(self, thread: threading.Thread, server: Any | None = None) -> None:
        self._thread = thread
        self._server = server

    def is_running(self) -> bool:
        return self._thread.is_alive()

    def join(self, timeout: Optional[float] = None) -> None:
        self._thread.join(timeout=timeout)

    def stop(self, timeout: float = 5.0) -> None:
        """Best-effort stop: ask uvicorn to exit and wait for the thread."""

        if self._server is not None:
            self._server.should_exit = True
        self._thread.join(timeout=timeout)


def start_webserver(resolver: Resolver, host: str, port: int) -> WebServerHandle:
    """Start the HTTP API under uvicorn in a daemon thread.

    Inputs:
      - resolver: Shared Resolver instance.
      - host: Bind address.
      - port: Bind port.

    Outputs:
      - WebServerHandle for the running server.
    """

    if host in ("0.0.0.0", "::"):
        logger.warning(
            "resolvescope webserver is bound to %s without authentication; consider restricting host",
            host,
        )

    app = create_app(resolver)
    config_uvicorn = uvicorn.Config(app, host=host, port=port, log_level="info")
    server = uvicorn.Server(config_uvicorn)

    def _runner() -> None:
        try:
            server.run()
        except Exception:
            logger.exception("Unhandled exception in webserver thread")

    thread = threading.Thread(target=_runner, name="resolvescope-webserver", daemon=True)
    thread.start()
    logger.info("Started resolvescope webserver on %s:%d", host, port)
    return WebServerHandle(thread, server=server)
