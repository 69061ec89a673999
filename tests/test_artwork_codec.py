"""Tests for artwork recompression (Pillow)."""

from __future__ import annotations

import io

from PIL import Image

from browse_core.artwork_codec import fit_within, recompress


def _image_bytes(size, mode="RGB", fmt="PNG", color=(200, 30, 30)) -> bytes:
    if mode == "RGBA":
        color = (*color[:3], 128)
    img = Image.new(mode, size, color)
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


def _open(data: bytes) -> Image.Image:
    img = Image.open(io.BytesIO(data))
    img.load()
    return img


# ---------------------------------------------------------------------------
# fit_within
# ---------------------------------------------------------------------------

def test_fit_within_keeps_small_sizes():
    assert fit_within(300, 200, 512) == (300, 200)
    assert fit_within(512, 512, 512) == (512, 512)


def test_fit_within_scales_longest_side():
    assert fit_within(1024, 512, 512) == (512, 256)
    assert fit_within(600, 3000, 512) == (102, 512)


def test_fit_within_never_collapses_to_zero():
    assert fit_within(10000, 1, 512) == (512, 1)


# ---------------------------------------------------------------------------
# recompress
# ---------------------------------------------------------------------------

def test_opaque_image_is_downscaled_to_jpeg():
    out = recompress(_image_bytes((1024, 768)), max_dim=512)
    assert out is not None
    img = _open(out)
    assert img.format == "JPEG"
    assert img.size == (512, 384)


def test_small_opaque_image_keeps_dimensions():
    out = recompress(_image_bytes((100, 50), fmt="JPEG"), max_dim=512)
    img = _open(out)
    assert img.size == (100, 50)


def test_transparent_image_stays_png_with_alpha():
    out = recompress(_image_bytes((800, 800), mode="RGBA"), max_dim=512)
    img = _open(out)
    assert img.format == "PNG"
    assert img.mode == "RGBA"
    assert img.size == (512, 512)


def test_undecodable_bytes_return_none():
    assert recompress(b"definitely not an image") is None


def test_empty_bytes_return_none():
    assert recompress(b"") is None


def test_result_over_ceiling_is_rejected():
    assert recompress(_image_bytes((64, 64)), max_bytes=10) is None
