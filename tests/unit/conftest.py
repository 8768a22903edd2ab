"""Shared helpers for unit tests."""

from __future__ import annotations

import struct
import zlib
from pathlib import Path

import numpy as np
from PIL import Image

from snapdiff.image import PixelImage


def solid(
    color: tuple[int, int, int, int],
    size: tuple[int, int] = (4, 4),
) -> PixelImage:
    """Return a solid-color PixelImage of *size* (width, height)."""
    return PixelImage.filled(size[0], size[1], color)


def with_pixels(
    base: PixelImage,
    pixels: dict[tuple[int, int], tuple[int, int, int, int]],
) -> PixelImage:
    """Return a copy of *base* with the given (x, y) pixels replaced."""
    arr = np.array(base.data)
    for (x, y), color in pixels.items():
        arr[y, x] = color
    return PixelImage.from_array(arr)


def write_png(
    path: Path,
    color: tuple[int, ...] | int,
    size: tuple[int, int] = (4, 4),
    mode: str = "RGBA",
) -> Path:
    """Write a solid-color PNG (creating parent dirs) and return its path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new(mode, size, color).save(path)
    return path


def write_image(path: Path, image: PixelImage) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    image.to_pil().save(path)
    return path


def png_chunk(kind: bytes, body: bytes = b"") -> bytes:
    crc = zlib.crc32(kind + body) & 0xFFFFFFFF
    return struct.pack(">I", len(body)) + kind + body + struct.pack(">I", crc)


def raw_png(
    width: int,
    height: int,
    *,
    bit_depth: int = 8,
    color_type: int = 6,
    rows: bytes = b"",
    chunks: tuple[bytes, ...] = (),
    compress_level: int = 9,
) -> bytes:
    """Assemble a PNG byte by byte.

    *rows* are the filtered scanlines (filter byte included); *chunks* are
    inserted between IHDR and IDAT.
    """
    ihdr = struct.pack(">IIBBBBB", width, height, bit_depth, color_type, 0, 0, 0)
    idat = zlib.compress(rows, compress_level) if rows else b""
    return (
        b"\x89PNG\r\n\x1a\n"
        + png_chunk(b"IHDR", ihdr)
        + b"".join(chunks)
        + png_chunk(b"IDAT", idat)
        + png_chunk(b"IEND")
    )


def oversized_png() -> bytes:
    """Header-only PNG declaring 20000x20000 pixels."""
    return raw_png(20000, 20000)
