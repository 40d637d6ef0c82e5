from __future__ import annotations

import io

from PIL import Image, ImageOps, UnidentifiedImageError


def decode_image_bytes(data: bytes) -> Image.Image:
    """Decode an uploaded photo or branding asset into an RGBA image.

    EXIF orientation is applied so crops line up with what the uploader saw.
    """
    if not data:
        raise RuntimeError("image payload is empty")
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            return ImageOps.exif_transpose(image).convert("RGBA")
    except Image.DecompressionBombError as exc:
        raise RuntimeError(f"image exceeds the decode pixel limit: {exc}") from exc
    except (UnidentifiedImageError, OSError) as exc:
        raise RuntimeError(f"unsupported or corrupt image data: {exc}") from exc
