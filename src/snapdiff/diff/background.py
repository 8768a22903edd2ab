"""Dominant background color detection."""

from __future__ import annotations

import numpy as np

from snapdiff.diff.pixels import Rgba, pack_rgba, unpack_rgba
from snapdiff.image import PixelImage


def detect_background(image: PixelImage) -> Rgba | None:
    """Return the most frequent color if it covers more than a quarter of the image.

    The histogram lives only for the duration of the call. Equally frequent
    colors resolve to the smallest packed RGBA value.
    """
    n_pixels = image.n_pixels
    if n_pixels == 0:
        return None
    keys, counts = np.unique(pack_rgba(image.pixels()), return_counts=True)
    best = int(np.argmax(counts))
    if int(counts[best]) <= n_pixels // 4:
        return None
    return unpack_rgba(keys[best])


def shared_background(left: PixelImage, right: PixelImage) -> Rgba | None:
    """Background usable for scoring: both sides must detect the same color."""
    bg_left = detect_background(left)
    if bg_left is None:
        return None
    bg_right = detect_background(right)
    return bg_left if bg_left == bg_right else None
