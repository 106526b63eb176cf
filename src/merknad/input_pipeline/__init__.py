"""Comment input pipelines: image intake, paste sanitization, plain text."""

from merknad.input_pipeline.image_intake import (
    Accepted,
    EncodedAsset,
    RawAsset,
    Rejected,
    SizeVerdict,
    intake,
)
from merknad.input_pipeline.paste import (
    ClipboardPayload,
    MarkedUp,
    PlainText,
    SanitizedContent,
    check_document,
    sanitize,
)
from merknad.input_pipeline.plain_text import strip_tags
from merknad.input_pipeline.word_filter import (
    clean_word_markup,
    count_word_markers,
    is_word_content,
)

__all__ = [
    "Accepted",
    "ClipboardPayload",
    "EncodedAsset",
    "MarkedUp",
    "PlainText",
    "RawAsset",
    "Rejected",
    "SanitizedContent",
    "SizeVerdict",
    "check_document",
    "clean_word_markup",
    "count_word_markers",
    "intake",
    "is_word_content",
    "sanitize",
    "strip_tags",
]
