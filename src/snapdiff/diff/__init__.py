"""Image and directory comparison engine."""

from snapdiff.diff.background import detect_background, shared_background
from snapdiff.diff.dirs import (
    DirDiff,
    DirDiffConfig,
    Pair,
    PairResult,
    accept_pairs,
    create_diff,
    pairs_from_paths,
)
from snapdiff.diff.images import (
    ContentDifference,
    ImageDifference,
    NoDifference,
    SizeMismatch,
    compare_images,
)
from snapdiff.diff.visualize import DiffImage, DiffImageMethod

__all__ = [
    "ContentDifference",
    "DiffImage",
    "DiffImageMethod",
    "DirDiff",
    "DirDiffConfig",
    "ImageDifference",
    "NoDifference",
    "Pair",
    "PairResult",
    "SizeMismatch",
    "accept_pairs",
    "compare_images",
    "create_diff",
    "detect_background",
    "pairs_from_paths",
    "shared_background",
]
