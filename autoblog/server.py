"""
HTTP debug surface.

Thin FastAPI wrappers over the same functions the scheduled run uses.
Every error response is JSON with an ``error`` field.
"""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from . import __version__
from .config import AppConfig
from .errors import ConfigError
from .fetch.feed import FeedFetcher
from .ledger.ledger import Ledger
from .llm.providers.factory import create_provider
from .publish.publisher import Publisher, build_artifact
from .runner import Pipeline, build_ledger, build_publisher, build_summarizer
from .summarize.summarizer import Summarizer
from .utils.logging import get_logger, log_event


ENDPOINTS_TEXT = (
    "Autoblog\n\n"
    "Endpoints:\n"
    "- /health - Health check\n"
    "- /test - Test RSS parser\n"
    "- /test-kv - Test ledger storage\n"
    "- /test-ai - Test AI summarizer\n"
    "- /test-github - Test content publisher\n"
    "- /trigger - Manually trigger the scheduled run"
)


class _Bindings:
    """Resolves collaborators from an injected pipeline or from config."""

    def __init__(self, cfg: AppConfig, pipeline: Pipeline | None, logger: logging.Logger):
        self.cfg = cfg
        self._pipeline = pipeline
        self.logger = logger
        self._ledger: Ledger | None = None
        self._ledger_built = False

    def fetcher(self):
        if self._pipeline is not None:
            return self._pipeline.fetcher
        return FeedFetcher(self.cfg.feed, self.logger)

    def ledger(self) -> Ledger | None:
        if self._pipeline is not None:
            return self._pipeline.ledger
        if not self._ledger_built:
            self._ledger = build_ledger(self.cfg, self.logger)
            self._ledger_built = True
        return self._ledger

    def summarizer(self) -> Summarizer:
        if self._pipeline is not None:
            if self._pipeline.summarizer is None:
                raise ConfigError("Generative backend not configured")
            return self._pipeline.summarizer
        return build_summarizer(self.cfg, self.logger)

    def publisher(self) -> Publisher:
        if self._pipeline is not None:
            if self._pipeline.publisher is None:
                raise ConfigError("Content store not configured")
            return self._pipeline.publisher
        return build_publisher(self.cfg, self.logger)

    def ai_enabled(self) -> bool:
        if self._pipeline is not None:
            return self._pipeline.summarizer is not None
        try:
            create_provider(self.cfg.provider, self.logger)
        except (ConfigError, ValueError):
            return False
        return True

    def pipeline(self) -> Pipeline:
        if self._pipeline is not None:
            return self._pipeline
        return Pipeline(
            fetcher=self.fetcher(),
            summarizer=self.summarizer(),
            publisher=self.publisher(),
            ledger=self.ledger(),
            max_items=self.cfg.feed.max_items_per_run,
            slug_host=self.cfg.feed.slug_host,
            logger=self.logger,
        )

    @property
    def slug_host(self) -> str:
        if self._pipeline is not None:
            return self._pipeline.slug_host
        return self.cfg.feed.slug_host


def _error(exc: Exception | str, status_code: int = 500, **extra: Any) -> JSONResponse:
    if isinstance(exc, Exception):
        body: dict[str, Any] = {"error": str(exc) or type(exc).__name__, "type": type(exc).__name__}
    else:
        body = {"error": exc}
    body.update(extra)
    return JSONResponse(body, status_code=status_code)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def create_app(cfg: AppConfig | None = None, pipeline: Pipeline | None = None) -> FastAPI:
    """Build the debug app; ``pipeline`` overrides config-built collaborators."""
    cfg = cfg or AppConfig()
    logger = get_logger("server")
    bindings = _Bindings(cfg, pipeline, logger)
    app = FastAPI(title="Autoblog debug API", version=__version__)

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception) -> JSONResponse:
        log_event(
            logger,
            "Unhandled error",
            level=logging.ERROR,
            event="http_error",
            path=request.url.path,
            error=f"{type(exc).__name__}: {exc}",
        )
        return _error(exc)

    @app.get("/")
    def root():
        return PlainTextResponse(ENDPOINTS_TEXT)

    @app.get("/health")
    def health():
        return {
            "status": "ok",
            "timestamp": _now(),
            "config": {
                "feedUrl": cfg.feed.url,
                "postsToFetch": pipeline.max_items if pipeline else cfg.feed.max_items_per_run,
                "kvEnabled": bindings.ledger() is not None,
                "aiEnabled": bindings.ai_enabled(),
            },
        }

    @app.get("/test")
    def test_feed():
        try:
            records = bindings.fetcher().fetch(3)
        except Exception as exc:  # noqa: BLE001
            return _error(exc)
        return [record.to_dict() for record in records]

    @app.get("/test-kv")
    def test_ledger():
        ledger = bindings.ledger()
        if ledger is None:
            return _error("Ledger not configured")
        try:
            count = ledger.count()
        except Exception as exc:  # noqa: BLE001
            return _error(exc)
        return {"message": "Ledger is working", "processedPostCount": count}

    @app.get("/test-ai")
    def test_ai():
        try:
            summarizer = bindings.summarizer()
            records = bindings.fetcher().fetch(1)
            if not records:
                return _error("No posts found in RSS feed", status_code=404)
            record = records[0]
            summary = summarizer.summarize(record)
        except Exception as exc:  # noqa: BLE001
            return _error(exc)
        return {
            "message": "AI summarizer is working",
            "post": {
                "title": record.title,
                "url": record.canonical_url,
                "categories": list(record.tags),
                "authors": list(record.contributors),
            },
            "summary": summary,
            "summaryLength": len(summary),
        }

    @app.get("/test-github")
    def test_publisher():
        try:
            publisher = bindings.publisher()
        except Exception as exc:  # noqa: BLE001
            return _error(exc, message="Content store credentials are not configured")
        try:
            summarizer = bindings.summarizer()
            records = bindings.fetcher().fetch(1)
            if not records:
                return _error("No posts found in RSS feed", status_code=404)
            record = records[0]
            artifact = build_artifact(record, summarizer.summarize(record), bindings.slug_host)
            success = publisher.publish(artifact)
        except Exception as exc:  # noqa: BLE001
            return _error(exc)
        path = publisher.artifact_path(artifact.slug)
        return JSONResponse(
            {
                "message": "Successfully published" if success else "Failed to publish",
                "success": success,
                "post": {"title": record.title, "slug": artifact.slug, "url": record.canonical_url},
                "path": path,
                "location": publisher.store.location(path),
            },
            status_code=200 if success else 500,
        )

    @app.get("/trigger")
    def trigger():
        try:
            result = bindings.pipeline().run(datetime.now(timezone.utc))
        except Exception as exc:  # noqa: BLE001
            return _error(exc)
        return {
            "message": "Scheduled run completed",
            "timestamp": _now(),
            "result": result.to_dict(),
        }

    return app
