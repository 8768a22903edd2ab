"""Pixel-level comparison of two decoded images."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from snapdiff.diff.background import shared_background
from snapdiff.diff.pixels import Rgba, equal_mask
from snapdiff.diff.visualize import DiffImage, DiffImageMethod, overlay_image, red_green_image
from snapdiff.image import PixelImage


@dataclass(frozen=True)
class NoDifference:
    """The two images are pixel-identical."""


@dataclass(frozen=True)
class SizeMismatch:
    left_size: tuple[int, int]
    right_size: tuple[int, int]


@dataclass(frozen=True)
class ContentDifference:
    """Same size, different pixels.

    When a shared background was detected, ``n_pixels`` excludes positions
    that hold the background color on both sides; otherwise it counts the
    whole image.
    """

    diff_images: tuple[DiffImage, ...]
    background: Rgba | None
    n_pixels: int
    n_different_pixels: int
    distance_sum: int

    @property
    def different_ratio(self) -> float:
        """Different pixels, in percent of ``n_pixels``."""
        return self.n_different_pixels / self.n_pixels * 100.0

    @property
    def color_distance(self) -> float:
        """``distance_sum`` normalised so one fully changed channel counts as 1."""
        return self.distance_sum / 255.0

    @property
    def avg_color_distance(self) -> float:
        return self.color_distance / self.n_pixels


ImageDifference = NoDifference | SizeMismatch | ContentDifference


def compare_images(left: PixelImage, right: PixelImage) -> ImageDifference:
    """Find differences between two images."""
    if left.size != right.size:
        return SizeMismatch(left_size=left.size, right_size=right.size)

    background = shared_background(left, right)

    n_pixels = left.n_pixels
    same = equal_mask(left.data, right.data)
    n_different_pixels = int(same.size - np.count_nonzero(same))
    if background is not None:
        on_background = np.all(left.data == np.asarray(background, dtype=np.uint8), axis=-1)
        n_pixels -= int(np.count_nonzero(same & on_background))

    if n_different_pixels == 0:
        return NoDifference()

    rg_image, distance_sum = red_green_image(left, right)
    return ContentDifference(
        diff_images=(
            DiffImage(DiffImageMethod.RED_GREEN, rg_image),
            DiffImage(DiffImageMethod.OVERLAY, overlay_image(left, right)),
        ),
        background=background,
        n_pixels=n_pixels,
        n_different_pixels=n_different_pixels,
        distance_sum=distance_sum,
    )
