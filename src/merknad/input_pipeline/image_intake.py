"""Image intake: decode, downscale, lossy re-encode and size ceiling check.

Pasted and uploaded images are often raw camera output.  Before one lands
in a comment it is scaled to a fixed width (aspect ratio kept), encoded as
a lossy raster inside a data URI, and rejected when the *estimated* encoded
size is above the ceiling.

The steps run in a fixed order: decode -> scale-compute -> draw -> encode
-> size-check.  Pillow work happens in a worker thread so the UI event loop
keeps serving other clients.
"""

# Pattern: Functional Core (pure helpers) + one async orchestrator

from __future__ import annotations

import asyncio
import base64
import io
import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeAlias

from PIL import Image, ImageOps, UnidentifiedImageError

from merknad.errors import DecodeError, InvalidDimensionsError, OversizedAssetError

if TYPE_CHECKING:
    from merknad.config import ImageSettings

logger = logging.getLogger(__name__)

TARGET_WIDTH = 600
MAX_ENCODED_BYTES = 5_000_000

# Empirical base64-overhead-times-compression factor.  The ceiling above was
# tuned against estimates produced with exactly this value.
SIZE_ESTIMATE_FACTOR = 0.5624896334383812

# The estimate always subtracts this marker's length, whatever the actual
# media type of the data URI is.
SIZE_ESTIMATE_MARKER = "data:image/png;base64,"

REJECTED_OVERSIZED = "oversized"

_MEDIA_TYPES = {
    "JPEG": "image/jpeg",
    "WEBP": "image/webp",
}


@dataclass(frozen=True)
class RawAsset:
    """Image bytes as handed over by the editor, plus the declared MIME type."""

    data: bytes
    mime_type: str
    name: str | None = None


@dataclass(frozen=True)
class Dimensions:
    width: int
    height: int


@dataclass(frozen=True)
class ScaledDimensions:
    """Target geometry; ``height`` keeps full float precision."""

    width: int
    height: float
    scale_factor: float

    @property
    def pixel_size(self) -> tuple[int, int]:
        """Integer raster size for the output surface."""
        return self.width, max(1, round(self.height))


@dataclass(frozen=True)
class EncodedAsset:
    """Re-encoded image as a data URI, with its estimated byte size."""

    data_uri: str
    estimated_bytes: float

    @classmethod
    def from_data_uri(cls, data_uri: str) -> EncodedAsset:
        return cls(data_uri=data_uri, estimated_bytes=estimate_encoded_size(data_uri))


@dataclass(frozen=True)
class Accepted:
    asset: EncodedAsset


@dataclass(frozen=True)
class Rejected:
    reason: str
    estimated_bytes: float

    def as_error(self, ceiling: int) -> OversizedAssetError:
        return OversizedAssetError(self.estimated_bytes, ceiling)


SizeVerdict: TypeAlias = Accepted | Rejected


def scaled_dimensions(
    original: Dimensions, target_width: int = TARGET_WIDTH
) -> ScaledDimensions:
    """Scale *original* to *target_width*, preserving aspect ratio.

    Narrow images are scaled up by the same formula; there is no
    "already small enough" shortcut.

    Raises:
        InvalidDimensionsError: If the original width or height is not positive.
    """
    if original.width <= 0 or original.height <= 0:
        msg = f"Cannot scale image with dimensions {original.width}x{original.height}"
        raise InvalidDimensionsError(msg)

    scale_factor = target_width / original.width
    return ScaledDimensions(
        width=target_width,
        height=original.height * scale_factor,
        scale_factor=scale_factor,
    )


def estimate_payload_bytes(payload_length: int) -> float:
    """Estimate decoded bytes for a base64 payload of *payload_length* chars."""
    return 4 * math.ceil(payload_length / 3) * SIZE_ESTIMATE_FACTOR


def estimate_encoded_size(data_uri: str) -> float:
    """Estimate the byte size of *data_uri* without decoding it.

    The estimate is approximate by construction and must not be replaced
    with an exact measurement.
    """
    return estimate_payload_bytes(len(data_uri) - len(SIZE_ESTIMATE_MARKER))


def judge_size(encoded: EncodedAsset, ceiling: int = MAX_ENCODED_BYTES) -> SizeVerdict:
    """Accept *encoded* if its estimate is at or below *ceiling*."""
    if encoded.estimated_bytes > ceiling:
        return Rejected(REJECTED_OVERSIZED, encoded.estimated_bytes)
    return Accepted(encoded)


def decode_image(data: bytes) -> Image.Image:
    """Decode *data* into a fully loaded, upright Pillow image.

    EXIF orientation is applied, so a portrait phone photo stored sideways
    reports its portrait size.

    Raises:
        DecodeError: If the bytes are not a valid (or are a truncated) image.
    """
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
        msg = f"Could not decode image ({len(data)} bytes): {exc}"
        raise DecodeError(msg) from exc
    return ImageOps.exif_transpose(image)


def _flatten(image: Image.Image) -> Image.Image:
    """Drop alpha onto a white background; lossy formats here have no alpha."""
    if image.mode in ("RGBA", "LA") or (
        image.mode == "P" and "transparency" in image.info
    ):
        rgba = image.convert("RGBA")
        background = Image.new("RGB", rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.getchannel("A"))
        return background
    return image.convert("RGB")


def render_scaled(image: Image.Image, dimensions: ScaledDimensions) -> Image.Image:
    """Draw *image* onto a surface of the scaled pixel size."""
    return _flatten(image).resize(dimensions.pixel_size, Image.Resampling.LANCZOS)


def encode_data_uri(image: Image.Image, output_format: str, quality: int) -> str:
    """Encode *image* in a lossy format and wrap it in a data URI."""
    buf = io.BytesIO()
    image.save(buf, format=output_format, quality=quality)
    payload = base64.b64encode(buf.getvalue()).decode("ascii")
    return f"data:{_MEDIA_TYPES[output_format]};base64,{payload}"


def _draw_and_encode(
    image: Image.Image, dimensions: ScaledDimensions, config: ImageSettings
) -> str:
    scaled = render_scaled(image, dimensions)
    return encode_data_uri(scaled, config.output_format, config.quality)


async def intake(asset: RawAsset, config: ImageSettings | None = None) -> SizeVerdict:
    """Run the full intake pipeline for one inserted image.

    Args:
        asset: Raw image bytes from the editor.
        config: Image settings; defaults to the application settings.

    Returns:
        ``Accepted`` with the encoded asset, or ``Rejected("oversized")``.

    Raises:
        DecodeError: Bytes are not an image.
        InvalidDimensionsError: Decoded geometry is degenerate.
    """
    if config is None:
        from merknad.config import get_settings

        config = get_settings().image

    logger.info(
        "[INTAKE] Input: name=%s, type=%s, size=%d bytes (%.1f KB)",
        asset.name,
        asset.mime_type,
        len(asset.data),
        len(asset.data) / 1024,
    )

    image = await asyncio.to_thread(decode_image, asset.data)
    original = Dimensions(*image.size)

    dimensions = scaled_dimensions(original, config.target_width)
    logger.debug(
        "[INTAKE] Scaling %dx%d -> %dx%.2f (factor %.4f)",
        original.width,
        original.height,
        dimensions.width,
        dimensions.height,
        dimensions.scale_factor,
    )

    data_uri = await asyncio.to_thread(_draw_and_encode, image, dimensions, config)
    encoded = EncodedAsset.from_data_uri(data_uri)

    verdict = judge_size(encoded, config.max_encoded_bytes)
    logger.info(
        "[INTAKE] Estimated size %.1f KB, ceiling %.1f KB -> %s",
        encoded.estimated_bytes / 1000,
        config.max_encoded_bytes / 1000,
        type(verdict).__name__,
    )
    return verdict
