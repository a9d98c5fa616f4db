"""
Record summarization with bounded retries.

``Summarizer.summarize`` either returns a summary or raises SummaryError;
it never substitutes placeholder text. ``summarize_many`` is the batch
helper that does substitute FALLBACK_SUMMARY per failed record.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from ..config import SummaryConfig
from ..core.types import FeedRecord
from ..errors import SummaryError
from ..llm.prompts import build_messages
from ..llm.providers.base import TextProvider
from ..llm.tracing import record_span_error, set_span_output, start_span
from ..utils.logging import log_event


DISCLAIMER = (
    "**AI-Generated Summary**: This is an automated summary of a blog post created "
    "using AI. For the full details and context, please read the original post.\n\n"
)

FALLBACK_SUMMARY = (
    "**AI-Generated Summary**: Summary generation failed. "
    "Please read the original post for full details."
)


class SummaryTooShortError(ValueError):
    """The backend answered with less text than the minimum length."""


class Summarizer:
    """Turns a FeedRecord into a short digest via a TextProvider."""

    def __init__(
        self,
        provider: TextProvider,
        cfg: SummaryConfig | None = None,
        logger: logging.Logger | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.provider = provider
        self.cfg = cfg or SummaryConfig()
        self.logger = logger
        self._sleep = sleep

    def summarize(self, record: FeedRecord, include_disclaimer: bool | None = None) -> str:
        """Generate a summary for ``record``.

        Attempts are retried up to ``max_attempts`` with a delay of
        ``attempt * retry_base_delay`` seconds between them.

        Raises:
            SummaryError: After the final attempt fails
        """
        if include_disclaimer is None:
            include_disclaimer = self.cfg.include_disclaimer
        max_attempts = max(1, self.cfg.max_attempts)
        messages = build_messages(record, self.cfg.max_input_chars)
        last_error: Exception | None = None

        for attempt in range(1, max_attempts + 1):
            with start_span(
                "autoblog.summarize",
                input_value=messages[-1]["content"],
                metadata={
                    "llm.provider": self.provider.name,
                    "llm.model": self.provider.cfg.model,
                    "record.guid": record.guid,
                    "attempt": attempt,
                },
            ) as span:
                try:
                    summary = self._attempt(messages)
                    set_span_output(span, summary)
                except Exception as exc:  # noqa: BLE001
                    record_span_error(span, exc)
                    last_error = exc
                    log_event(
                        self.logger,
                        "Summary attempt failed",
                        level=logging.WARNING,
                        event="summary_attempt_failed",
                        guid=record.guid,
                        title=record.title,
                        attempt=attempt,
                        max_attempts=max_attempts,
                        error=f"{type(exc).__name__}: {exc}",
                    )
                    if attempt < max_attempts:
                        self._sleep(self.cfg.retry_base_delay * attempt)
                    continue

            log_event(
                self.logger,
                "Summary complete",
                event="summary_complete",
                guid=record.guid,
                attempt=attempt,
                chars=len(summary),
            )
            if include_disclaimer:
                summary = DISCLAIMER + summary
            return summary

        raise SummaryError(
            f"Failed to generate summary after {max_attempts} attempts: {last_error}",
            attempts=max_attempts,
            last_error=last_error,
        )

    def _attempt(self, messages) -> str:
        text = self.provider.generate(
            messages,
            max_tokens=self.cfg.max_output_tokens,
            temperature=self.cfg.temperature,
        )
        if not isinstance(text, str):
            raise TypeError(f"Expected text from provider, got {type(text).__name__}")
        text = text.strip()
        if len(text) < self.cfg.min_chars:
            raise SummaryTooShortError(
                f"Generated summary is too short or empty ({len(text)} < {self.cfg.min_chars} chars)"
            )
        return text

    def summarize_many(self, records: list[FeedRecord]) -> list[str]:
        """Summarize sequentially; failed records get FALLBACK_SUMMARY."""
        summaries: list[str] = []
        for record in records:
            try:
                summaries.append(self.summarize(record))
            except SummaryError as exc:
                log_event(
                    self.logger,
                    "Summary fallback used",
                    level=logging.WARNING,
                    event="summary_fallback",
                    guid=record.guid,
                    title=record.title,
                    error=str(exc),
                )
                summaries.append(FALLBACK_SUMMARY)
        return summaries
