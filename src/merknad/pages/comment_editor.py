"""Comment editor page.

Mounts a Quasar QEditor (``ui.editor``) and wires it to an
``EditingSession``: content changes go through Word detection, the
"Lim fra Word" button reads the browser clipboard, uploaded images go
through image intake, and saving strips the comment to plain text.

Route: /comment
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from nicegui import app, events, ui

from merknad.config import get_settings
from merknad.errors import ClipboardAccessError
from merknad.input_pipeline.image_intake import RawAsset
from merknad.input_pipeline.paste import MarkedUp, PlainText
from merknad.session import EditingSession, SessionCallbacks, get_registry

if TYPE_CHECKING:
    from nicegui import Client

    from merknad.input_pipeline.paste import ClipboardPayload

logger = logging.getLogger(__name__)

# Prefers text/html, falls back to plain text.  Errors come back as data
# so the server side can tell "denied" from "empty".
_READ_CLIPBOARD_JS = """
(async () => {
    try {
        const items = await navigator.clipboard.read();
        for (const item of items) {
            if (item.types.includes('text/html')) {
                const blob = await item.getType('text/html');
                return {html: await blob.text()};
            }
        }
        return {text: await navigator.clipboard.readText()};
    } catch (err) {
        return {error: String(err)};
    }
})()
"""

_TOOLBAR = (
    "[['bold', 'italic', 'strike'], ['hr', 'quote'],"
    " ['unordered', 'ordered', 'indent', 'outdent'], ['link', 'code']]"
)


class QEditorHost:
    """Adapts ``ui.editor`` to the ``EditorHost`` contract."""

    def __init__(self, editor: ui.editor) -> None:
        self.editor = editor

    def get_current_text(self) -> str:
        return self.editor.value or ""

    def set_current_text(self, text: str) -> None:
        self.editor.set_value(text)

    def insert_text(self, text: str) -> None:
        self.editor.run_method("runCmd", "insertText", text)

    def append_markup(self, markup: str) -> None:
        self.editor.set_value(self.get_current_text() + markup)

    def append_image(self, data_uri: str | None) -> None:
        """Resolve an image insertion; ``None`` means rejected."""
        if data_uri is not None:
            self.append_markup(f'<p><img src="{data_uri}"></p>')


class BrowserClipboard:
    """Reads the client's clipboard through the async Clipboard API."""

    def __init__(self, client: Client, timeout: float) -> None:
        self.client = client
        self.timeout = timeout

    async def read(self) -> ClipboardPayload:
        try:
            result: dict[str, Any] = await self.client.run_javascript(
                _READ_CLIPBOARD_JS, timeout=self.timeout
            )
        except TimeoutError as exc:
            msg = f"Clipboard read timed out after {self.timeout}s"
            raise ClipboardAccessError(msg) from exc

        if "error" in result:
            msg = f"Clipboard read refused: {result['error']}"
            raise ClipboardAccessError(msg)
        if result.get("html"):
            return MarkedUp(result["html"], content_type="text/html")
        return PlainText(result.get("text") or "")


def _store_comment(text: str) -> None:
    comments = app.storage.user.setdefault("comments", [])
    comments.append(text)
    logger.info("Saved comment (%d chars)", len(text))
    ui.notify("Merknad lagret", type="positive")


@ui.page("/comment")
async def comment_editor_page(initial_value: str = "") -> None:
    """Render the comment editor for the connecting client."""
    settings = get_settings()
    registry = get_registry()

    await ui.context.client.connected()
    client = ui.context.client

    editor = (
        ui.editor(value=initial_value, placeholder="Skriv merknad...")
        .classes("w-full")
        .style(f"min-height: {settings.editor.height}")
        .props(f':toolbar="{_TOOLBAR}" data-testid="comment-editor"')
    )
    host = QEditorHost(editor)

    def cancel_edit_comment() -> None:
        host.set_current_text(initial_value)
        ui.notify("Redigering avbrutt")

    callbacks = SessionCallbacks(
        notify=lambda message: ui.notify(message, type="warning"),
        save_comment=_store_comment,
        cancel_edit_comment=cancel_edit_comment,
    )
    session = registry.create(
        client.id,
        lambda: EditingSession(
            host,
            BrowserClipboard(client, settings.editor.clipboard_timeout),
            callbacks,
            settings,
        ),
    )

    editor.on_value_change(lambda _e: session.on_content_changed())

    async def handle_image_upload(upload_event: events.UploadEventArguments) -> None:
        asset = RawAsset(
            data=await upload_event.file.read(),  # pyright: ignore[reportAttributeAccessIssue]
            mime_type=upload_event.file.content_type,  # pyright: ignore[reportAttributeAccessIssue]
            name=upload_event.file.name,  # pyright: ignore[reportAttributeAccessIssue]
        )
        await session.insert_image(asset, host.append_image)
        upload_event.sender.reset()  # pyright: ignore[reportAttributeAccessIssue]

    with ui.row().classes("w-full items-center"):
        ui.button(
            "Lim fra Word", icon="content_paste", on_click=session.paste_from_word
        )
        ui.upload(
            label="Sett inn bilde",
            on_upload=handle_image_upload,
            auto_upload=True,
        ).props('accept="image/*" flat data-testid="image-upload"')

    with ui.row().classes("w-full"):
        ui.button("Lagre merknad", on_click=session.save).props(
            'data-testid="save-comment"'
        )
        ui.button("Avbryt", on_click=session.cancel).props(
            'outline data-testid="cancel-comment"'
        )

    client.on_disconnect(lambda: registry.destroy(session))
