"""Artwork recompression: CPU-bound Pillow work, no I/O.

Callers on the event loop should run ``recompress`` in a thread
(``asyncio.to_thread``) so decoding never blocks other requests.
"""

from __future__ import annotations

import io
import logging
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)


def _has_alpha(img: Image.Image) -> bool:
    if img.mode in ("RGBA", "LA", "PA"):
        return True
    return img.mode == "P" and "transparency" in img.info


def fit_within(width: int, height: int, max_dim: int) -> Tuple[int, int]:
    """Scale (width, height) down so the longer side is at most *max_dim*.

    Aspect ratio is preserved; sizes already within bounds are returned
    unchanged and no side ever drops below 1px.
    """
    longest = max(width, height)
    if longest <= max_dim:
        return width, height
    scale = max_dim / longest
    return max(1, round(width * scale)), max(1, round(height * scale))


def recompress(
    raw: bytes,
    *,
    max_dim: int = 512,
    quality: int = 85,
    max_bytes: int = 6 * 1024 * 1024,
) -> Optional[bytes]:
    """Decode, downscale and re-encode *raw* image bytes.

    Images with transparency are re-encoded as PNG, everything else as
    JPEG at *quality*.  Returns ``None`` when the bytes are not a decodable
    image, encoding fails, or the result is still larger than *max_bytes*.
    """
    if not raw:
        return None

    try:
        with Image.open(io.BytesIO(raw)) as src:
            src.load()
            alpha = _has_alpha(src)
            working = src.convert("RGBA" if alpha else "RGB")

        target = fit_within(working.width, working.height, max_dim)
        if target != working.size:
            working = working.resize(target, Image.Resampling.LANCZOS)

        out = io.BytesIO()
        if alpha:
            working.save(out, format="PNG", optimize=True)
        else:
            working.save(out, format="JPEG", quality=quality, optimize=True)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        logger.warning("Artwork recompression failed: %s", exc)
        return None

    result = out.getvalue()
    if len(result) > max_bytes:
        logger.warning("Recompressed artwork still too large (%d bytes)", len(result))
        return None
    return result
