"""Minimal RGBA8 raster image and its PNG codec."""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

from snapdiff.errors import ErrorKind, LoadError, SnapdiffError

log = logging.getLogger(__name__)

LFS_HEADER = b"version https://git-lfs.github.com/spec/v1\n"

_SIXTEEN_BIT_MODES = frozenset({"I", "I;16", "I;16B", "I;16L", "I;16N"})


@dataclass(frozen=True, eq=False)
class PixelImage:
    """Immutable RGBA8 image.

    ``data`` has shape ``(height, width, 4)`` and dtype ``uint8``; rows are
    stored top to bottom, so ``data.reshape(-1, 4)`` yields pixels in
    row-major order.
    """

    width: int
    height: int
    data: np.ndarray = field(repr=False)

    def __post_init__(self) -> None:
        if self.data.dtype != np.uint8 or self.data.shape != (self.height, self.width, 4):
            raise ValueError(
                f"pixel buffer {self.data.shape}/{self.data.dtype} does not match "
                f"{self.width}x{self.height} RGBA8"
            )
        # read-only buffers are adopted as they are, writeable ones are copied
        if self.data.flags.writeable:
            frozen = self.data.copy()
            frozen.flags.writeable = False
            object.__setattr__(self, "data", frozen)

    @classmethod
    def from_array(cls, arr: np.ndarray) -> PixelImage:
        """Wrap an ``(h, w, 4)`` uint8 array."""
        if arr.ndim != 3 or arr.shape[2] != 4:
            raise ValueError(f"expected (h, w, 4) array, got {arr.shape}")
        return cls(width=arr.shape[1], height=arr.shape[0], data=arr.astype(np.uint8, copy=False))

    @classmethod
    def from_pil(cls, img: Image.Image) -> PixelImage:
        """Convert any Pillow image to 8-bit RGBA."""
        if img.mode in _SIXTEEN_BIT_MODES:
            # keep the high byte, the way 16-bit PNG samples are stripped to 8 bits
            transparency = img.info.get("transparency")
            wide = np.asarray(img).astype(np.uint32)
            img = Image.fromarray((wide >> 8).astype(np.uint8))
            if isinstance(transparency, int):
                img.info["transparency"] = transparency >> 8
        if img.mode != "RGBA":
            img = img.convert("RGBA")
        arr = np.array(img, dtype=np.uint8)
        arr.flags.writeable = False
        return cls.from_array(arr)

    @classmethod
    def filled(cls, width: int, height: int, color: tuple[int, int, int, int]) -> PixelImage:
        arr = np.empty((height, width, 4), dtype=np.uint8)
        arr[:, :] = color
        arr.flags.writeable = False
        return cls.from_array(arr)

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    @property
    def n_pixels(self) -> int:
        return self.width * self.height

    def pixels(self) -> np.ndarray:
        """Return the pixel buffer as an ``(n, 4)`` view."""
        return self.data.reshape(-1, 4)

    def pixel(self, x: int, y: int) -> tuple[int, int, int, int]:
        r, g, b, a = (int(c) for c in self.data[y, x])
        return r, g, b, a

    def to_pil(self) -> Image.Image:
        return Image.fromarray(np.ascontiguousarray(self.data))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelImage):
            return NotImplemented
        return self.size == other.size and np.array_equal(self.data, other.data)

    __hash__ = None  # type: ignore[assignment]


def decode_png(data: bytes, path: Path | None = None) -> PixelImage:
    """Decode PNG bytes into a PixelImage.

    Raises:
        SnapdiffError: ``EXTERNAL_POINTER_STUB`` if the bytes are an unfetched
            Git LFS pointer, ``DECODE_ERROR`` for anything else that is not a
            decodable PNG.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            if img.format != "PNG":
                raise SnapdiffError(
                    ErrorKind.DECODE_ERROR, path, f"Not a PNG image (format: {img.format})"
                )
            img.load()
            return PixelImage.from_pil(img)
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        OSError,
        EOFError,
        SyntaxError,
        ValueError,
    ) as exc:
        if data.startswith(LFS_HEADER):
            raise SnapdiffError(
                ErrorKind.EXTERNAL_POINTER_STUB,
                path,
                "Image is unresolved LFS file. "
                "Maybe you need to install lfs - https://git-lfs.com/?",
            ) from exc
        raise SnapdiffError(ErrorKind.DECODE_ERROR, path, f"Image error: {exc}") from exc


def encode_png(image: PixelImage, *, optimize: bool = False) -> bytes:
    """Encode as 8-bit RGBA PNG."""
    buf = io.BytesIO()
    image.to_pil().save(buf, format="PNG", optimize=optimize)
    return buf.getvalue()


def load_image(path: Path) -> PixelImage | LoadError:
    """Load a PNG file, returning the failure as a value instead of raising."""
    if not path.is_file():
        return LoadError(ErrorKind.FILE_NOT_FOUND, path, f"File not found: `{path}`")
    try:
        data = path.read_bytes()
    except OSError as exc:
        log.debug("cannot read %s: %s", path, exc)
        return LoadError(ErrorKind.IO_ERROR, path, f"IO error: {exc}")
    try:
        return decode_png(data, path)
    except SnapdiffError as exc:
        log.debug("cannot decode %s: %s", path, exc)
        return exc.to_load_error()


def save_image(image: PixelImage, path: Path, *, optimize: bool = False) -> None:
    path.write_bytes(encode_png(image, optimize=optimize))
