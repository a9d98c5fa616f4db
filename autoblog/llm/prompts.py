"""Prompt loading and rendering helpers for summarization."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from ..core.types import FeedRecord
from ..fetch.text import strip_html, truncate_words
from .providers.base import Message


_PROMPT_DIR = Path(__file__).resolve().parent.parent / "prompts"


@lru_cache(maxsize=None)
def _load_template(name: str) -> str:
    path = _PROMPT_DIR / f"{name}.md"
    return path.read_text(encoding="utf-8").strip()


def _render_template(name: str, **values: str) -> str:
    template = _load_template(name)
    return template.format(**values)


def system_prompt() -> str:
    return _load_template("system")


def build_summary_prompt(record: FeedRecord, max_input_chars: int) -> str:
    """Render the per-record instruction with markup-free, truncated content."""
    body = strip_html(record.full_content or record.excerpt)
    return _render_template(
        "summary",
        title=record.title,
        authors=", ".join(record.contributors),
        categories=", ".join(record.tags),
        content=truncate_words(body, max_input_chars),
    )


def build_messages(record: FeedRecord, max_input_chars: int) -> list[Message]:
    return [
        {"role": "system", "content": system_prompt()},
        {"role": "user", "content": build_summary_prompt(record, max_input_chars)},
    ]
