"""
Pipeline orchestration for one scheduled run.

Each run moves through four stages:
1. FETCHING: retrieve and parse the feed (fatal on failure)
2. FILTERING: drop records the ledger already holds (all records are new
   when no ledger is bound)
3. PROCESSING: for each remaining record, in feed order,
   summarize -> build artifact -> publish -> mark processed
4. SUMMARY: log success/failure counts and elapsed time

Records are processed strictly one at a time. A failure inside one record
is caught at the record boundary and never affects the others.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import logging
import time
from typing import Protocol

from .config import AppConfig, get_github_settings
from .core.slug import DEFAULT_SLUG_HOST
from .core.types import FeedRecord, PublishedArtifact, RunResult
from .errors import ConfigError, PublishError
from .fetch.feed import FeedFetcher
from .ledger.ledger import Ledger
from .ledger.store import create_store
from .llm.providers.factory import create_provider
from .llm.tracing import set_span_output, setup_langfuse, start_span
from .publish.publisher import Publisher, build_artifact
from .publish.store import ContentStore, GitHubContentStore, LocalContentStore
from .summarize.summarizer import Summarizer
from .utils.logging import get_logger, log_event


class RecordSource(Protocol):
    def fetch(self, max_items: int | None = None) -> list[FeedRecord]: ...


@dataclass
class Pipeline:
    """Collaborators for one run.

    Attributes:
        fetcher: Feed source
        summarizer: Required generative stage
        publisher: Required content-store stage
        ledger: Optional dedup ledger; None means every record is new
        max_items: Cap on records considered per run
        slug_host: Host whose first path segment becomes the artifact slug
        logger: Event sink shared by all stages
    """
    fetcher: RecordSource
    summarizer: Summarizer | None
    publisher: Publisher | None
    ledger: Ledger | None = None
    max_items: int | None = None
    slug_host: str = DEFAULT_SLUG_HOST
    logger: logging.Logger | None = None

    def run(self, trigger_time: datetime | None = None) -> RunResult:
        """Execute one full pass.

        Raises:
            ConfigError: If the summarizer or publisher is not bound
            FeedFetchError: If the feed cannot be retrieved
        """
        started = time.monotonic()
        trigger_time = trigger_time or datetime.now(timezone.utc)
        result = RunResult(started_at=trigger_time.isoformat())
        logger = self.logger

        with start_span("autoblog.run", input_value={"trigger": result.started_at}) as span:
            try:
                summarizer, publisher = self._require_bindings()
                log_event(logger, "Run start", event="run_start", trigger=result.started_at)

                records = self.fetcher.fetch(self.max_items)
                result.fetched = len(records)

                pending = self.filter_new(records)
                result.new = len(pending)
                result.skipped = result.fetched - result.new
            except Exception as exc:
                result.duration_seconds = time.monotonic() - started
                log_event(
                    logger,
                    "Run failed",
                    level=logging.ERROR,
                    event="run_failed",
                    error=f"{type(exc).__name__}: {exc}",
                    duration_seconds=round(result.duration_seconds, 3),
                )
                raise

            for index, record in enumerate(pending, start=1):
                try:
                    artifact = self.process_record(record, summarizer, publisher)
                except Exception as exc:  # noqa: BLE001
                    result.failed += 1
                    result.failures.append(
                        {"guid": record.guid, "title": record.title, "error": str(exc)}
                    )
                    log_event(
                        logger,
                        "Item failed",
                        level=logging.ERROR,
                        event="item_failed",
                        index=index,
                        total=len(pending),
                        guid=record.guid,
                        title=record.title,
                        error=f"{type(exc).__name__}: {exc}",
                    )
                    continue
                result.succeeded += 1
                log_event(
                    logger,
                    "Item complete",
                    event="item_complete",
                    index=index,
                    total=len(pending),
                    guid=record.guid,
                    slug=artifact.slug,
                )

            result.duration_seconds = time.monotonic() - started
            log_event(
                logger,
                "Run complete",
                event="run_complete",
                fetched=result.fetched,
                new=result.new,
                succeeded=result.succeeded,
                failed=result.failed,
                duration_seconds=round(result.duration_seconds, 3),
            )
            set_span_output(span, result.to_dict())
        return result

    def filter_new(self, records: list[FeedRecord]) -> list[FeedRecord]:
        """Drop in-batch guid duplicates and records already in the ledger."""
        unique: list[FeedRecord] = []
        seen: set[str] = set()
        for record in records:
            if record.guid in seen:
                continue
            seen.add(record.guid)
            unique.append(record)

        if self.ledger is None:
            log_event(
                self.logger,
                "Ledger not available; processing all records",
                level=logging.WARNING,
                event="ledger_unavailable",
                count=len(unique),
            )
            return unique

        try:
            log_event(
                self.logger,
                "Ledger status",
                event="ledger_status",
                processed_count=self.ledger.count(),
            )
        except Exception as exc:  # noqa: BLE001
            log_event(
                self.logger,
                "Ledger count failed",
                level=logging.WARNING,
                event="ledger_read_failed",
                error=f"{type(exc).__name__}: {exc}",
            )

        processed = self.ledger.batch_is_processed([r.guid for r in unique])
        pending = [r for r in unique if not processed.get(r.guid, False)]
        log_event(
            self.logger,
            "Records filtered",
            event="records_filtered",
            fetched=len(records),
            new=len(pending),
        )
        return pending

    def process_record(
        self,
        record: FeedRecord,
        summarizer: Summarizer | None = None,
        publisher: Publisher | None = None,
    ) -> PublishedArtifact:
        """Summarize, publish and mark one record.

        The ledger is only written after a successful publish.

        Raises:
            SummaryError: If summarization exhausts its attempts
            PublishError: If the content store rejects the artifact
            LedgerError: If the ledger write fails
        """
        if summarizer is None or publisher is None:
            summarizer, publisher = self._require_bindings()

        summary = summarizer.summarize(record)
        artifact = build_artifact(record, summary, self.slug_host)
        if not publisher.publish(artifact):
            raise PublishError(f"Failed to publish {publisher.artifact_path(artifact.slug)}")

        if self.ledger is not None:
            self.ledger.mark_processed(
                record.guid,
                title=record.title,
                slug=artifact.slug,
                url=record.canonical_url,
            )
        return artifact

    def _require_bindings(self) -> tuple[Summarizer, Publisher]:
        if self.summarizer is None:
            raise ConfigError("Generative backend not configured")
        if self.publisher is None:
            raise ConfigError("Content store not configured")
        return self.summarizer, self.publisher


def build_ledger(cfg: AppConfig, logger: logging.Logger | None = None) -> Ledger | None:
    """Return the configured ledger, or None when disabled or unavailable."""
    if not cfg.ledger.enabled:
        return None
    try:
        store = create_store(cfg.ledger.backend, cfg.ledger.path)
    except Exception as exc:  # noqa: BLE001
        log_event(
            logger,
            "Ledger store unavailable",
            level=logging.WARNING,
            event="ledger_unavailable",
            backend=cfg.ledger.backend,
            error=f"{type(exc).__name__}: {exc}",
        )
        return None
    return Ledger(
        store,
        logger=logger,
        page_size=cfg.ledger.page_size,
        default_ttl=cfg.ledger.ttl_seconds,
    )


def build_summarizer(cfg: AppConfig, logger: logging.Logger | None = None) -> Summarizer:
    """Raises ConfigError when the generative backend lacks credentials."""
    provider = create_provider(cfg.provider, logger)
    return Summarizer(provider, cfg.summary, logger)


def build_content_store(cfg: AppConfig, logger: logging.Logger | None = None) -> ContentStore:
    backend = (cfg.publisher.backend or "github").lower().strip()
    if backend == "local":
        return LocalContentStore(cfg.publisher.local_root)
    if backend == "github":
        token, owner, repo = get_github_settings(cfg.publisher)
        if not (token and owner and repo):
            raise ConfigError(
                "GitHub configuration missing (GITHUB_TOKEN, GITHUB_OWNER, GITHUB_REPO)"
            )
        return GitHubContentStore(
            token,
            owner,
            repo,
            branch=cfg.publisher.branch,
            api_base=cfg.publisher.api_base,
            timeout=cfg.publisher.timeout_seconds,
            logger=logger,
        )
    raise ValueError(f"Unsupported publisher backend: {cfg.publisher.backend}")


def build_publisher(cfg: AppConfig, logger: logging.Logger | None = None) -> Publisher:
    return Publisher(
        build_content_store(cfg, logger),
        content_root=cfg.publisher.content_root,
        request_delay=cfg.publisher.request_delay,
        logger=logger,
    )


def build_pipeline(cfg: AppConfig, logger: logging.Logger | None = None) -> Pipeline:
    """Construct every collaborator from config.

    Raises:
        ConfigError: If a required binding is missing
    """
    logger = logger or get_logger()
    setup_langfuse(cfg.langfuse)
    return Pipeline(
        fetcher=FeedFetcher(cfg.feed, logger),
        summarizer=build_summarizer(cfg, logger),
        publisher=build_publisher(cfg, logger),
        ledger=build_ledger(cfg, logger),
        max_items=cfg.feed.max_items_per_run,
        slug_host=cfg.feed.slug_host,
        logger=logger,
    )


def run_pipeline(
    cfg: AppConfig,
    trigger_time: datetime | None = None,
    logger: logging.Logger | None = None,
) -> RunResult:
    """Scheduled entry point: build collaborators and run once."""
    logger = logger or get_logger()
    try:
        pipeline = build_pipeline(cfg, logger)
    except Exception as exc:
        log_event(
            logger,
            "Run failed",
            level=logging.ERROR,
            event="run_failed",
            error=f"{type(exc).__name__}: {exc}",
        )
        raise
    return pipeline.run(trigger_time)
