"""
Text normalization helpers shared by the feed parser and the summarizer.

Covers HTML entity decoding, whitespace cleanup, markup stripping, and
word-boundary truncation.
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup


# Named entities recognized in feed text; anything else is left untouched.
NAMED_ENTITIES: dict[str, str] = {
    "amp": "&",
    "lt": "<",
    "gt": ">",
    "quot": '"',
    "apos": "'",
    "nbsp": " ",
    "eacute": "é",
    "egrave": "è",
    "ecirc": "ê",
    "euml": "ë",
    "agrave": "à",
    "acirc": "â",
    "auml": "ä",
    "ocirc": "ô",
    "ouml": "ö",
    "icirc": "î",
    "iuml": "ï",
    "ccedil": "ç",
    "ntilde": "ñ",
    "uuml": "ü",
    "ucirc": "û",
    "ugrave": "ù",
}

_ENTITY_RE = re.compile(r"&(#[0-9]+|#[xX][0-9A-Fa-f]+|[A-Za-z]+);")
_NEWLINE_RUN_RE = re.compile(r"\n\s*")
_SPACE_RUN_RE = re.compile(r"\s+")


def decode_entities(text: str) -> str:
    """Decode numeric (decimal and hex) and known named HTML entities.

    Decoding happens in a single pass, so ``&amp;lt;`` becomes ``&lt;``
    rather than ``<``.

    Examples:
        >>> decode_entities("&#233;t&eacute; &amp; &#xE9;")
        'été & é'
    """
    return _ENTITY_RE.sub(_replace_entity, text)


def _replace_entity(match: re.Match[str]) -> str:
    body = match.group(1)
    if body.startswith("#"):
        digits = body[1:]
        try:
            if digits[:1] in ("x", "X"):
                return chr(int(digits[1:], 16))
            return chr(int(digits, 10))
        except (ValueError, OverflowError):
            return match.group(0)
    return NAMED_ENTITIES.get(body, match.group(0))


def clean_text(text: str) -> str:
    """Trim, fold newline runs into single spaces, then decode entities."""
    return decode_entities(_NEWLINE_RUN_RE.sub(" ", text.strip()))


def strip_html(html: str) -> str:
    """Reduce markup to plain text.

    Script, style and noscript bodies are dropped, text nodes are joined
    with spaces and whitespace runs collapse.
    """
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    text = soup.get_text(separator=" ")
    return _SPACE_RUN_RE.sub(" ", text).strip()


def truncate_words(text: str, max_chars: int) -> str:
    """Truncate at the last space at or before ``max_chars`` and append ``...``.

    Falls back to a hard cut when the window holds no space.

    Examples:
        >>> truncate_words("one two three four", 11)
        'one two...'
    """
    if len(text) <= max_chars:
        return text
    window = text[:max_chars]
    last_space = window.rfind(" ")
    if last_space > 0:
        return window[:last_space] + "..."
    return window + "..."
