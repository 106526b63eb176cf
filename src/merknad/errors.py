"""Errors surfaced to the comment author.

Every error carries a ``user_message`` shown in the editor notification.
None of them end the editing session; the document is left unchanged.
"""

from __future__ import annotations


class CommentEditorError(Exception):
    """Base class for recoverable editor errors."""

    user_message = "Noe gikk galt, prøv igjen"

    def __init__(self, message: str, *, user_message: str | None = None) -> None:
        if user_message is not None:
            self.user_message = user_message
        super().__init__(message)


class DecodeError(CommentEditorError):
    """Bytes handed to the image intake are not a decodable image."""

    user_message = "Kunne ikke lese bildet, bruk et annet bilde"


class InvalidDimensionsError(CommentEditorError):
    """Decoded image has zero or negative width/height."""

    user_message = "Bildet har ugyldige dimensjoner"


class OversizedAssetError(CommentEditorError):
    """Estimated encoded size is above the configured ceiling."""

    user_message = "Bildet er for stort, bruk et mindre bilde"

    def __init__(self, estimated_bytes: float, ceiling: int) -> None:
        self.estimated_bytes = estimated_bytes
        self.ceiling = ceiling
        super().__init__(
            f"Estimated size {estimated_bytes:.0f} bytes exceeds {ceiling} bytes"
        )


class ClipboardAccessError(CommentEditorError):
    """The browser refused or failed to hand over clipboard contents."""

    user_message = "Fikk ikke tilgang til utklippstavlen, prøv igjen"
