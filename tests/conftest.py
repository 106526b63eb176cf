"""Shared pytest fixtures for Merknad tests."""

from __future__ import annotations

import io
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
from PIL import ExifTags, Image

from merknad.config import Settings, get_settings

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def _reset_settings_cache() -> Generator[None]:
    """Keep the cached settings singleton from leaking between tests."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    """Settings built from defaults only (no .env file)."""
    return Settings(_env_file=None)  # pyright: ignore[reportCallIssue]


@pytest.fixture
def word_clipboard_html() -> str:
    """Clipboard HTML as Word puts it there (heading, list, bookmark, link)."""
    return (FIXTURES_DIR / "word_clipboard.html").read_text(encoding="utf-8")


@pytest.fixture
def make_image() -> Callable[..., bytes]:
    """Factory for encoded test images.

    Usage: ``make_image(1200, 800)``, ``make_image(10, 10, mode="RGBA")`` or
    ``make_image(1200, 800, image_format="JPEG", orientation=6)`` for a
    photo stored sideways with an EXIF rotation tag.
    """

    def _make(
        width: int,
        height: int,
        *,
        mode: str = "RGB",
        image_format: str = "PNG",
        orientation: int | None = None,
    ) -> bytes:
        colour: tuple[int, ...] = (200, 40, 40)
        if mode == "RGBA":
            colour = (200, 40, 40, 128)
        image = Image.new(mode, (width, height), colour)
        buf = io.BytesIO()
        if orientation is None:
            image.save(buf, format=image_format)
        else:
            exif = Image.Exif()
            exif[ExifTags.Base.Orientation] = orientation
            image.save(buf, format=image_format, exif=exif)
        return buf.getvalue()

    return _make
