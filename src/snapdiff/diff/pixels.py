"""Per-pixel distance primitives.

Scalar forms operate on single RGBA tuples; the ``*_map`` forms apply the same
rule to whole ``(..., 4)`` uint8 arrays and agree with the scalar forms pixel
by pixel.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

Rgba = tuple[int, int, int, int]


def pixel_distance(left: Sequence[int], right: Sequence[int]) -> int:
    """Largest absolute channel difference over R, G, B and A."""
    return max(abs(int(a) - int(b)) for a, b in zip(left, right))


def pixel_min_max_distance(left: Sequence[int], right: Sequence[int]) -> tuple[int, int]:
    """Return ``(diff_min, diff_max)`` for one pixel.

    ``diff_max`` is the largest amount by which a right channel exceeds the
    left one, ``diff_min`` the largest amount by which a left channel exceeds
    the right one. Both are 0 when no channel moves in that direction.
    """
    diff_min = 0
    diff_max = 0
    for c1, c2 in zip(left, right):
        c1, c2 = int(c1), int(c2)
        if c2 > c1:
            diff_max = max(diff_max, c2 - c1)
        else:
            diff_min = max(diff_min, c1 - c2)
    return diff_min, diff_max


def distance_map(left: np.ndarray, right: np.ndarray) -> np.ndarray:
    """Vectorised :func:`pixel_distance`; returns uint8 with the channel axis dropped."""
    delta = left.astype(np.int16) - right.astype(np.int16)
    return np.abs(delta).max(axis=-1).astype(np.uint8)


def min_max_distance_map(left: np.ndarray, right: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Vectorised :func:`pixel_min_max_distance`."""
    delta = right.astype(np.int16) - left.astype(np.int16)
    diff_max = np.clip(delta, 0, 255).max(axis=-1).astype(np.uint8)
    diff_min = np.clip(-delta, 0, 255).max(axis=-1).astype(np.uint8)
    return diff_min, diff_max


def equal_mask(left: np.ndarray, right: np.ndarray) -> np.ndarray:
    """Boolean mask of positions whose four channels are all equal."""
    return np.all(left == right, axis=-1)


def pack_rgba(pixels: np.ndarray) -> np.ndarray:
    """Pack ``(..., 4)`` uint8 pixels into uint32 keys (R in the high byte)."""
    p = pixels.astype(np.uint32)
    return (p[..., 0] << 24) | (p[..., 1] << 16) | (p[..., 2] << 8) | p[..., 3]


def unpack_rgba(key: int) -> Rgba:
    key = int(key)
    return (key >> 24) & 0xFF, (key >> 16) & 0xFF, (key >> 8) & 0xFF, key & 0xFF
