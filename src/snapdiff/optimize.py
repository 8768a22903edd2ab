"""PNG size optimization checks."""

from __future__ import annotations

import io
import logging
import struct
from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from PIL import Image
from PIL.PngImagePlugin import PngInfo

from snapdiff.diff.dirs import list_image_dir
from snapdiff.errors import ErrorKind, SnapdiffError

log = logging.getLogger(__name__)

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

# chunks Pillow reads and writes back without changing their content
_REWRITABLE_CHUNKS = frozenset(
    {
        b"IHDR",
        b"PLTE",
        b"IDAT",
        b"IEND",
        b"tRNS",
        b"tEXt",
        b"zTXt",
        b"iTXt",
        b"iCCP",
        b"pHYs",
        b"eXIf",
    }
)
_SAVED_INFO_KEYS = ("icc_profile", "transparency", "dpi", "exif")


@dataclass(frozen=True)
class OptimizationResult:
    path: Path
    old_size: int
    new_size: int
    improvement: float
    size_limit_breached: bool
    improvement_limit_breached: bool


def _png_chunks(data: bytes) -> Iterator[tuple[bytes, bytes]]:
    """Yield ``(type, body)`` for each chunk of a PNG stream."""
    pos = len(PNG_SIGNATURE)
    while pos + 8 <= len(data):
        (length,) = struct.unpack(">I", data[pos : pos + 4])
        yield data[pos + 4 : pos + 8], data[pos + 8 : pos + 8 + length]
        pos += length + 12


def can_reencode(data: bytes) -> bool:
    """True if a Pillow round trip keeps every sample and chunk of *data*.

    Only 8-bit PNGs qualify, since Pillow narrows 16-bit color on load, and
    only those whose ancillary chunks Pillow can write back.
    """
    if not data.startswith(PNG_SIGNATURE):
        return False
    for kind, body in _png_chunks(data):
        if kind == b"IHDR":
            if len(body) < 13 or body[8] != 8:
                return False
        elif kind not in _REWRITABLE_CHUNKS:
            return False
    return True


def optimize_png(data: bytes) -> bytes:
    """Re-encode PNG bytes with Pillow's optimizer.

    Returns the original bytes when the file cannot be re-encoded without
    loss, cannot be decoded, or the re-encoded file is not smaller.
    """
    if not can_reencode(data):
        return data
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            if "aspect" in img.info:
                # pHYs without a unit is read but never written back
                return data
            params: dict[str, Any] = {
                key: img.info[key] for key in _SAVED_INFO_KEYS if key in img.info
            }
            text = getattr(img, "text", {})
            if text:
                pnginfo = PngInfo()
                for key, value in text.items():
                    pnginfo.add_text(key, value)
                params["pnginfo"] = pnginfo
            buf = io.BytesIO()
            img.save(buf, format="PNG", optimize=True, **params)
    except (OSError, Image.DecompressionBombError) as exc:
        log.warning("PNG optimization failed: %s", exc)
        return data
    out = buf.getvalue()
    return out if len(out) < len(data) else data


def check_file_optimization(
    path: Path,
    *,
    optimize: bool = False,
    size_limit_kib: int | None = None,
    improvement_limit: float | None = None,
) -> OptimizationResult | None:
    """Check one file; return None when it is already optimal and within limits."""
    try:
        old_data = path.read_bytes()
    except OSError as exc:
        raise SnapdiffError(ErrorKind.IO_ERROR, path, f"IO error: {exc}") from exc
    new_data = optimize_png(old_data)
    old_size = len(old_data)
    new_size = len(new_data)

    checked_size = new_size if optimize else old_size
    is_big = size_limit_kib is not None and checked_size > size_limit_kib * 1024
    if old_size <= new_size and not is_big:
        return None

    if optimize and new_size < old_size:
        try:
            path.write_bytes(new_data)
        except OSError as exc:
            raise SnapdiffError(ErrorKind.IO_ERROR, path, f"IO error: {exc}") from exc
    improvement = (old_size - new_size) / old_size if old_size else 0.0
    over_improvement = improvement_limit is not None and improvement > improvement_limit
    return OptimizationResult(
        path=path,
        old_size=old_size,
        new_size=new_size,
        improvement=improvement,
        size_limit_breached=is_big,
        improvement_limit_breached=over_improvement,
    )


def check_size_optimizations(
    root: Path,
    *,
    optimize: bool = False,
    size_limit_kib: int | None = None,
    improvement_limit: float | None = None,
    jobs: int | None = None,
) -> list[OptimizationResult]:
    """Check every PNG under *root*; results are sorted by path."""
    if not root.is_dir():
        raise SnapdiffError(ErrorKind.NOT_DIRECTORY, root, f"Not a directory: `{root}`")
    paths = sorted(list_image_dir(root))

    def _check(path: Path) -> OptimizationResult | None:
        return check_file_optimization(
            path,
            optimize=optimize,
            size_limit_kib=size_limit_kib,
            improvement_limit=improvement_limit,
        )

    with ThreadPoolExecutor(max_workers=jobs) as pool:
        results = [r for r in pool.map(_check, paths) if r is not None]
    return sorted(results, key=lambda r: r.path)
