"""Editing session lifecycle for one mounted comment editor.

An ``EditingSession`` owns the live editor document for one client and is
the only path through which pipeline output reaches it.  Sessions are
created and destroyed through a ``SessionRegistry``: creating a session
for an owner that already holds one returns the existing handle, so a
re-rendered page never mounts a second editor.

Once a session is closed, results of work still in flight (image intake)
are discarded without touching the document.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from merknad.errors import ClipboardAccessError, CommentEditorError
from merknad.input_pipeline.image_intake import Accepted, Rejected, intake
from merknad.input_pipeline.paste import MarkedUp, PlainText, check_document, sanitize
from merknad.input_pipeline.plain_text import strip_tags
from merknad.input_pipeline.word_filter import count_word_markers

if TYPE_CHECKING:
    from collections.abc import Callable, Hashable

    from merknad.config import Settings
    from merknad.input_pipeline.image_intake import RawAsset
    from merknad.input_pipeline.paste import ClipboardPayload

logger = logging.getLogger(__name__)

WORD_PASTE_DETECTED = "Du limte inn fra Word. Vi skal ha fikset på det."


class EditorHost(Protocol):
    """Narrow contract of the rich-text editor widget."""

    def get_current_text(self) -> str:
        """Export the document's current text."""
        ...

    def set_current_text(self, text: str) -> None:
        """Replace the document content (fires a change notification)."""
        ...

    def insert_text(self, text: str) -> None:
        """Insert plain text at the cursor."""
        ...

    def append_markup(self, markup: str) -> None:
        """Append markup at the end of the document."""
        ...


class ClipboardReader(Protocol):
    async def read(self) -> ClipboardPayload:
        """Read the clipboard, preferring rich markup over plain text.

        Raises:
            ClipboardAccessError: The platform denied or failed the read.
        """
        ...


@dataclass(frozen=True)
class SessionCallbacks:
    """Callbacks from the session back to the page that owns it."""

    notify: Callable[[str], None]
    save_comment: Callable[[str], None]
    cancel_edit_comment: Callable[[], None]


class EditingSession:
    """Routes editor events for one document through the input pipelines."""

    def __init__(
        self,
        host: EditorHost,
        clipboard: ClipboardReader,
        callbacks: SessionCallbacks,
        settings: Settings,
    ) -> None:
        self.host = host
        self.clipboard = clipboard
        self.callbacks = callbacks
        self.settings = settings
        self._closed = False
        # Word markers in the document when the user was last notified
        self._seen_word_markers = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if not self._closed:
            logger.debug("Editing session %x closed", id(self))
        self._closed = True

    def _notify_error(self, exc: CommentEditorError) -> None:
        logger.warning("%s: %s", type(exc).__name__, exc)
        self.callbacks.notify(exc.user_message)

    def on_content_changed(self) -> None:
        """Passive Word detection on every document change.

        Notifies once per Word payload that lands in the document; later
        edits to a document still holding that payload stay quiet.  Rewrites
        the document only when ``editor.auto_correct_on_change`` is enabled.
        """
        if self._closed:
            return

        current = self.host.get_current_text()
        result = check_document(current)
        if not result.was_modified:
            self._seen_word_markers = 0
            return

        markers = count_word_markers(current)
        if markers > self._seen_word_markers:
            self.callbacks.notify(WORD_PASTE_DETECTED)
        self._seen_word_markers = markers

        if self.settings.editor.auto_correct_on_change:
            logger.info("[PASTE] Rewriting document with cleaned content")
            self.host.set_current_text(result.text)

    async def paste_from_word(self) -> None:
        """Explicit "paste from Word" action.

        Rich clipboard content is cleaned and appended; plain text is
        inserted at the cursor.  No diff against the existing document.
        """
        try:
            payload = await self.clipboard.read()
        except ClipboardAccessError as exc:
            if not self._closed:
                self._notify_error(exc)
            return

        if self._closed:
            logger.debug("Session closed during clipboard read, dropping paste")
            return

        result = sanitize(payload)
        match payload:
            case MarkedUp():
                self.host.append_markup(result.text)
            case PlainText():
                self.host.insert_text(result.text)

        if result.was_modified:
            self.callbacks.notify(WORD_PASTE_DETECTED)

    async def insert_image(
        self, asset: RawAsset, resolve: Callable[[str | None], None]
    ) -> None:
        """Run image intake and hand the verdict back to the widget.

        ``resolve`` receives the data URI on acceptance and ``None`` on
        rejection or error.  It is never called after the session closed.
        """
        image_settings = self.settings.image
        try:
            verdict = await intake(asset, image_settings)
        except CommentEditorError as exc:
            if self._closed:
                return
            self._notify_error(exc)
            resolve(None)
            return

        if self._closed:
            logger.info(
                "[INTAKE] Session closed, discarding verdict for %s", asset.name
            )
            return

        match verdict:
            case Accepted(asset=encoded):
                resolve(encoded.data_uri)
            case Rejected():
                ceiling = image_settings.max_encoded_bytes
                self._notify_error(verdict.as_error(ceiling))
                resolve(None)

    def save(self) -> None:
        """Forward the comment as plain text to the save callback."""
        if self._closed:
            return
        self.callbacks.save_comment(strip_tags(self.host.get_current_text()))

    def cancel(self) -> None:
        if self._closed:
            return
        self.callbacks.cancel_edit_comment()


class SessionRegistry:
    """Creates at most one live ``EditingSession`` per owner.

    The owner key is whatever identifies a mounted editor (for NiceGUI,
    the client id).
    """

    def __init__(self) -> None:
        self._sessions: dict[Hashable, EditingSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, owner: Hashable) -> EditingSession | None:
        return self._sessions.get(owner)

    def create(
        self,
        owner: Hashable,
        factory: Callable[[], EditingSession],
    ) -> EditingSession:
        """Return *owner*'s live session, creating it with *factory* if absent."""
        session = self._sessions.get(owner)
        if session is not None and not session.closed:
            return session

        session = factory()
        self._sessions[owner] = session
        logger.debug("Created editing session for owner %r", owner)
        return session

    def destroy(self, session: EditingSession) -> None:
        """Close *session* and release its owner slot.  Idempotent."""
        session.close()
        for owner, held in list(self._sessions.items()):
            if held is session:
                del self._sessions[owner]
                logger.debug("Destroyed editing session for owner %r", owner)


_registry = SessionRegistry()


def get_registry() -> SessionRegistry:
    """Return the process-wide session registry."""
    return _registry
