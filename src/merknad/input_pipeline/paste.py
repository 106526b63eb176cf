"""Clipboard paste sanitization.

Two entry points share the Word cleanup pass:

- ``sanitize`` for an explicit clipboard payload (the "paste from Word"
  toolbar action), diffing cleaned output against the clipboard text.
- ``check_document`` for the passive change listener, diffing against the
  editor's current exported text.

``was_modified`` is always derived by comparing strings, never reported by
the cleanup step itself.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TypeAlias

from merknad.input_pipeline.word_filter import clean_word_markup

logger = logging.getLogger(__name__)

RICH_CONTENT_TYPES = frozenset(("text/html", "application/xhtml+xml"))


@dataclass(frozen=True)
class PlainText:
    text: str


@dataclass(frozen=True)
class MarkedUp:
    """Clipboard markup and the content type it was offered as."""

    markup: str
    content_type: str = "text/html"

    @property
    def is_rich(self) -> bool:
        return self.content_type.lower() in RICH_CONTENT_TYPES


ClipboardPayload: TypeAlias = PlainText | MarkedUp


@dataclass(frozen=True)
class SanitizedContent:
    text: str
    was_modified: bool


def _compare(original: str, cleaned: str) -> SanitizedContent:
    return SanitizedContent(text=cleaned, was_modified=cleaned != original)


def sanitize(payload: ClipboardPayload) -> SanitizedContent:
    """Clean *payload* and report whether cleaning changed it.

    Rich markup goes through the Word cleanup pass; plain text and markup
    offered under a non-rich content type pass through unchanged.
    """
    match payload:
        case MarkedUp(markup=markup) if payload.is_rich:
            result = _compare(markup, clean_word_markup(markup))
        case MarkedUp(markup=markup):
            result = _compare(markup, markup)
        case PlainText(text=text):
            result = _compare(text, text)

    logger.debug(
        "[PASTE] %s payload, %d chars, modified=%s",
        type(payload).__name__,
        len(result.text),
        result.was_modified,
    )
    return result


def check_document(current_text: str) -> SanitizedContent:
    """Run the cleanup pass over the editor's exported text.

    Used on every content change; cheap for non-Word content because the
    cleanup pass returns early when no origin marker is found.
    """
    return _compare(current_text, clean_word_markup(current_text))
