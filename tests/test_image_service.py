"""Tests for image loading and decoding."""
from __future__ import annotations

import struct
import zlib

import numpy as np
import pytest
from PIL import Image

from conftest import encode_png, gradient_image
from pixelcraft.models.image_model import SourceImage, Transform
from pixelcraft.services.errors import DecodeError, EmptyInputError


def test_load_image_from_disk(image_service, tmp_path):
    path = tmp_path / "photo.png"
    data = encode_png(gradient_image(50, 30))
    path.write_bytes(data)

    source = image_service.load_image(path)

    assert (source.width, source.height) == (50, 30)
    assert source.mode == "RGB"
    assert source.pil_image.mode == "RGBA"
    assert source.path == path
    assert source.size_bytes == len(data)


def test_missing_file_raises(image_service, tmp_path):
    with pytest.raises(FileNotFoundError):
        image_service.load_image(tmp_path / "nope.png")


def test_non_image_file_raises_decode_error(image_service, tmp_path):
    path = tmp_path / "notes.png"
    path.write_text("just text")

    with pytest.raises(DecodeError):
        image_service.load_image(path)


def test_truncated_png_raises_decode_error(image_service):
    rng = np.random.default_rng(0)
    noise = Image.fromarray(rng.integers(0, 256, size=(64, 64, 3), dtype=np.uint8))
    data = encode_png(noise)

    with pytest.raises(DecodeError):
        image_service.decode_bytes(data[: len(data) // 2])


def _png_header(width: int, height: int) -> bytes:
    # only the header: Pillow checks the pixel count before reading any data
    def chunk(tag: bytes, body: bytes) -> bytes:
        return struct.pack(">I", len(body)) + tag + body + struct.pack(">I", zlib.crc32(tag + body))

    ihdr = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", ihdr) + chunk(b"IEND", b"")


def test_oversized_image_raises_decode_error(image_service, resample_service):
    data = _png_header(30000, 30000)

    with pytest.raises(DecodeError):
        image_service.decode_bytes(data)
    with pytest.raises(DecodeError):
        resample_service.resample(data, Transform.identity(), 16)


def test_empty_bytes_raise_empty_input(image_service):
    with pytest.raises(EmptyInputError):
        image_service.decode_bytes(b"")


def test_from_pil_does_not_touch_original(image_service):
    original = Image.new("L", (10, 6), 128)

    source = image_service.from_pil(original)

    assert original.mode == "L"
    assert source.mode == "L"
    assert source.pil_image.mode == "RGBA"
    assert source.pixels.shape == (6, 10, 4)


def test_pixels_are_read_only(gradient_source):
    with pytest.raises(ValueError):
        gradient_source.pixels[0, 0, 0] = 1


def test_ensure_source_passes_through_and_rejects_unknown(image_service, gradient_source):
    assert image_service.ensure_source(gradient_source) is gradient_source
    assert isinstance(image_service.ensure_source(gradient_image(8, 8)), SourceImage)
    with pytest.raises(DecodeError):
        image_service.ensure_source(42)
    with pytest.raises(EmptyInputError):
        image_service.ensure_source(None)
