"""Photo normalization before upload or embedding."""

import base64
import io
import logging
from dataclasses import dataclass

from PIL import Image, ImageOps

from registration_desk.domain.registrations import EncodedPhoto

logger = logging.getLogger(__name__)


@dataclass
class ImageNormalizer:
    """Resize and recompress photos into a bounded JPEG."""

    max_width: int = 400
    quality: int = 70

    def normalize(self, raw: bytes) -> EncodedPhoto | None:
        """Return the normalized photo, or None when the bytes cannot be decoded.

        EXIF orientation is applied first. Images wider than ``max_width`` are
        scaled down preserving aspect ratio; narrower images keep their
        dimensions and are only re-encoded.
        """
        try:
            with Image.open(io.BytesIO(raw)) as source:
                source.load()
                image = ImageOps.exif_transpose(source)
                width, height = image.size
                if width > self.max_width:
                    scaled_height = max(1, round(height * self.max_width / width))
                    image = image.resize(
                        (self.max_width, scaled_height), Image.Resampling.LANCZOS
                    )
                if image.mode not in {"RGB", "L"}:
                    image = image.convert("RGB")
                buffer = io.BytesIO()
                image.save(buffer, format="JPEG", quality=self.quality, optimize=True)
                final_width, final_height = image.size
        except (OSError, ValueError, Image.DecompressionBombError):
            logger.warning("Discarding undecodable photo", extra={"size": len(raw)})
            return None
        return EncodedPhoto(
            content=buffer.getvalue(),
            content_type="image/jpeg",
            width=final_width,
            height=final_height,
        )


def to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for embedding."""
    mime_type = detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def from_data_url(data_url: str) -> bytes | None:
    """Decode the payload of a base64 data URL."""
    header, _, payload = data_url.partition(",")
    if not header.startswith("data:") or not header.endswith(";base64"):
        return None
    try:
        return base64.b64decode(payload, validate=True)
    except ValueError:
        return None


def detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
