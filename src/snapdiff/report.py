"""HTML report rendering for directory comparisons."""

from __future__ import annotations

import base64
import io
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from jinja2 import Environment, PackageLoader, select_autoescape
from PIL import Image

from snapdiff import __version__
from snapdiff.diff.dirs import PairResult
from snapdiff.diff.images import ContentDifference, NoDifference, SizeMismatch
from snapdiff.errors import ErrorKind, LoadError, SnapdiffError
from snapdiff.image import encode_png
from snapdiff.optimize import optimize_png

log = logging.getLogger(__name__)

IMAGE_SIZE_LIMIT = 400
IMAGE_PIXELIZE_LIMIT = 400

_env = Environment(
    loader=PackageLoader("snapdiff", "templates"),
    autoescape=select_autoescape(["html", "j2"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


@dataclass(frozen=True)
class ReportConfig:
    left_title: str = "Left image"
    right_title: str = "Right image"
    embed_images: bool = False
    is_review: bool = False
    optimize_size: bool = False


@dataclass
class _Stat:
    label: str
    kind: str
    value: str


@dataclass
class _ImageSlot:
    src: str | None = None
    width: int | None = None
    height: int | None = None
    pixelated: bool = False
    message: str | None = None


def embed_png_url(data: bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(data).decode("ascii")


def html_size(
    width: int, height: int, size_limit: int = IMAGE_SIZE_LIMIT
) -> tuple[int | None, int | None]:
    """Constrain the longer side to *size_limit*; the browser scales the other."""
    if width > height:
        return min(width, size_limit), None
    return None, min(height, size_limit)


def _slot(width: int, height: int, src: str) -> _ImageSlot:
    w, h = html_size(width, height)
    return _ImageSlot(
        src=src,
        width=w,
        height=h,
        pixelated=min(width, height) < IMAGE_PIXELIZE_LIMIT,
    )


def _render_image(config: ReportConfig, path: Path, error: LoadError | None) -> _ImageSlot:
    if error is not None:
        if error.kind is ErrorKind.FILE_NOT_FOUND:
            return _ImageSlot(message="File is missing")
        return _ImageSlot(message=f"Error: {error.message}")
    try:
        if config.embed_images:
            data = path.read_bytes()
            if config.optimize_size:
                data = optimize_png(data)
            with Image.open(io.BytesIO(data)) as img:
                size = img.size
            return _slot(*size, embed_png_url(data))
        with Image.open(path) as img:
            size = img.size
    except OSError as exc:
        raise SnapdiffError(ErrorKind.IO_ERROR, path, f"IO error: {exc}") from exc
    return _slot(*size, str(path))


def _render_stats(config: ReportConfig, result: PairResult) -> list[_Stat]:
    outcome = result.outcome
    if isinstance(outcome, NoDifference):
        return [_Stat("Status", "ok", "Match")]
    if isinstance(outcome, SizeMismatch):
        lw, lh = outcome.left_size
        rw, rh = outcome.right_size
        return [
            _Stat("Status", "error", "Size mismatch"),
            _Stat(f"{config.left_title} size", "", f"{lw}x{lh}"),
            _Stat(f"{config.right_title} size", "", f"{rw}x{rh}"),
        ]
    if isinstance(outcome, ContentDifference):
        return [
            _Stat(
                "Different pixels",
                "warning",
                f"{outcome.n_different_pixels} ({outcome.different_ratio:.1f}%)",
            ),
            _Stat("Color distance", "", f"{outcome.color_distance:.3f}"),
            _Stat("Avg. color distance", "", f"{outcome.avg_color_distance:.4f}"),
        ]
    if outcome.is_missing_file_error:
        return [_Stat("Status", "error", "Missing file")]
    return [_Stat("Status", "error", "Loading error")]


def _render_diff_images(
    config: ReportConfig, result: PairResult
) -> list[tuple[str, _ImageSlot]]:
    outcome = result.outcome
    if not isinstance(outcome, ContentDifference):
        return []
    out = []
    for diff_image in outcome.diff_images:
        image = diff_image.image
        data = encode_png(image, optimize=config.optimize_size)
        out.append((str(diff_image.method), _slot(image.width, image.height, embed_png_url(data))))
    return out


def _render_entry(config: ReportConfig, idx: int, result: PairResult) -> dict[str, Any]:
    return {
        "id": idx,
        "title": result.title,
        "stats": _render_stats(config, result),
        "left": _render_image(config, result.left_path, result.left_error),
        "right": _render_image(config, result.right_path, result.right_error),
        "diffs": _render_diff_images(config, result),
    }


def render_html_report(config: ReportConfig, results: Sequence[PairResult]) -> str:
    """Render comparison results as a self-contained HTML page.

    Raises:
        SnapdiffError: ``IO_ERROR`` if an image referenced by a result can no
            longer be read.
    """
    entries = [_render_entry(config, idx, result) for idx, result in enumerate(results)]
    log.debug("rendering %d entries (review=%s)", len(entries), config.is_review)
    template = _env.get_template("report.html.j2")
    return template.render(
        title="Snapdiff review" if config.is_review else "Snapdiff report",
        generator=f"snapdiff {__version__}",
        generated_at=datetime.now().replace(microsecond=0),
        config=config,
        entries=entries,
    )
