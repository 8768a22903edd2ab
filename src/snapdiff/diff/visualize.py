"""Difference visualizations."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np

from snapdiff.diff.pixels import distance_map, min_max_distance_map
from snapdiff.image import PixelImage


class DiffImageMethod(str, Enum):
    """How a difference image was rendered."""

    RED_GREEN = "RedGreen"
    OVERLAY = "Overlay"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class DiffImage:
    method: DiffImageMethod
    image: PixelImage


def red_green_image(left: PixelImage, right: PixelImage) -> tuple[PixelImage, int]:
    """Render the red/green magnitude map and the total color distance.

    Red marks pixels where the left side is brighter, green where the right
    side is brighter (or neither); the intensity is the largest channel delta
    in that direction.
    """
    diff_min, diff_max = min_max_distance_map(left.data, right.data)
    red = diff_min > diff_max

    out = np.zeros((left.height, left.width, 4), dtype=np.uint8)
    out[..., 0] = np.where(red, diff_min, 0)
    out[..., 1] = np.where(red, 0, diff_max)
    out[..., 3] = 255

    distance_sum = int(np.maximum(diff_min, diff_max).sum(dtype=np.uint64))
    return PixelImage.from_array(out), distance_sum


def overlay_image(left: PixelImage, right: PixelImage) -> PixelImage:
    """Render the right image over a faded copy of the unchanged left pixels."""
    changed = distance_map(left.data, right.data) > 0

    out = left.data.copy()
    alpha = out[..., 3]
    # opaque unchanged pixels are faded, translucent ones hidden
    out[..., 3] = np.where(alpha > 128, alpha // 3, 0)
    out[changed] = right.data[changed]
    return PixelImage.from_array(out)
