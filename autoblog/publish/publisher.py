"""
Artifact construction and conditional publishing.

Each summarized record becomes one pretty-printed JSON document at
``{content_root}/{slug}.json``. Publishing reads the current revision
marker first and sends it with the write, so an existing file is updated
rather than clobbered blindly.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Callable

from ..core.slug import DEFAULT_SLUG_HOST, artifact_slug
from ..core.types import FeedRecord, PublishedArtifact
from ..llm.tracing import set_span_output, start_span
from ..utils.logging import log_event
from .store import ContentStore


def build_artifact(
    record: FeedRecord,
    summary: str,
    slug_host: str = DEFAULT_SLUG_HOST,
) -> PublishedArtifact:
    """Map a record and its summary to the published document.

    Raises:
        ValueError: If no slug can be derived from the URL or the title
    """
    slug = artifact_slug(record, slug_host)
    if not slug:
        raise ValueError(f"Cannot derive slug for {record.canonical_url!r} / {record.title!r}")
    return PublishedArtifact(
        slug=slug,
        title=record.title,
        url=record.canonical_url,
        published_at=record.published_at,
        summary=summary,
        authors=record.contributors,
        categories=record.tags,
        guid=record.guid,
    )


def serialize_artifact(artifact: PublishedArtifact) -> str:
    return json.dumps(artifact.to_json(), indent=2, ensure_ascii=False)


class Publisher:
    """Writes artifacts to a ContentStore."""

    def __init__(
        self,
        store: ContentStore,
        content_root: str = "site/content/posts",
        request_delay: float = 1.0,
        logger: logging.Logger | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.store = store
        self.content_root = content_root.strip("/")
        self.request_delay = request_delay
        self.logger = logger
        self._sleep = sleep

    def artifact_path(self, slug: str) -> str:
        if not self.content_root:
            return f"{slug}.json"
        return f"{self.content_root}/{slug}.json"

    def publish(self, artifact: PublishedArtifact) -> bool:
        """Create or update the artifact; never raises.

        Returns:
            True when the store accepted the write
        """
        path = self.artifact_path(artifact.slug)
        with start_span("autoblog.publish", input_value={"path": path}) as span:
            try:
                revision = self.store.get_revision(path)
                content = serialize_artifact(artifact)
                if revision:
                    message = f'chore: update summary for "{artifact.title}"'
                else:
                    message = f'feat: add summary for "{artifact.title}"'
                result = self.store.write(path, content, message, revision)
            except Exception as exc:  # noqa: BLE001
                log_event(
                    self.logger,
                    "Publish failed",
                    level=logging.ERROR,
                    event="publish_failed",
                    path=path,
                    title=artifact.title,
                    error=f"{type(exc).__name__}: {exc}",
                )
                return False

            set_span_output(span, {"ok": result.ok, "status": result.status_code})
            if not result.ok:
                log_event(
                    self.logger,
                    "Publish failed",
                    level=logging.ERROR,
                    event="publish_failed",
                    path=path,
                    title=artifact.title,
                    status_code=result.status_code,
                    detail=result.detail,
                )
                return False

        log_event(
            self.logger,
            "Publish complete",
            event="publish_complete",
            path=path,
            action="update" if revision else "create",
            url=result.url,
        )
        return True

    def publish_many(self, artifacts: list[PublishedArtifact]) -> int:
        """Publish sequentially with a fixed delay between requests.

        Returns:
            Number of successful publishes
        """
        success_count = 0
        for index, artifact in enumerate(artifacts):
            if index > 0 and self.request_delay > 0:
                self._sleep(self.request_delay)
            if self.publish(artifact):
                success_count += 1
        log_event(
            self.logger,
            "Batch publish complete",
            event="publish_batch_complete",
            total=len(artifacts),
            succeeded=success_count,
        )
        return success_count
