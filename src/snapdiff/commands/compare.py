"""snapdiff compare: compare two individual PNG files."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import click

from snapdiff.commands._helpers import fail
from snapdiff.diff.dirs import Pair, compute_pair_diff
from snapdiff.diff.images import ContentDifference, ImageDifference, NoDifference, SizeMismatch
from snapdiff.errors import LeftRightError
from snapdiff.image import save_image


def _to_dict(outcome: ImageDifference | LeftRightError) -> dict[str, Any]:
    if isinstance(outcome, NoDifference):
        return {"status": "match"}
    if isinstance(outcome, SizeMismatch):
        return {
            "status": "size_mismatch",
            "left_size": list(outcome.left_size),
            "right_size": list(outcome.right_size),
        }
    if isinstance(outcome, ContentDifference):
        return {
            "status": "different",
            "n_pixels": outcome.n_pixels,
            "n_different_pixels": outcome.n_different_pixels,
            "distance_sum": outcome.distance_sum,
            "different_ratio": outcome.different_ratio,
            "background": list(outcome.background) if outcome.background else None,
        }
    return {
        "status": "error",
        "side": outcome.side,
        "left": outcome.left.message if outcome.left else None,
        "right": outcome.right.message if outcome.right else None,
    }


def _summary(outcome: ImageDifference | LeftRightError) -> str:
    if isinstance(outcome, NoDifference):
        return "match"
    if isinstance(outcome, SizeMismatch):
        (lw, lh), (rw, rh) = outcome.left_size, outcome.right_size
        return f"size mismatch: {lw}x{lh} vs {rw}x{rh}"
    if isinstance(outcome, ContentDifference):
        return (
            f"diff: {outcome.n_different_pixels}/{outcome.n_pixels} pixels "
            f"({outcome.different_ratio:.2f}%)"
        )
    errors = [e for e in (outcome.left, outcome.right) if e is not None]
    return "error: " + "; ".join(e.message for e in errors)


@click.command("compare")
@click.argument("left", type=click.Path(dir_okay=False, path_type=Path))
@click.argument("right", type=click.Path(dir_okay=False, path_type=Path))
@click.option(
    "--diff-output",
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help="Write the difference images (one PNG per method) into this directory.",
)
@click.option("--json", "use_json", is_flag=True, help="JSON output.")
def compare_cmd(left: Path, right: Path, diff_output: Path | None, use_json: bool) -> None:
    """Compare two PNG images pixel-by-pixel.

    Exit 0 if the images match, 1 if they differ, 2 on error (missing or
    undecodable file).
    """
    outcome = compute_pair_diff(Pair(title=left.name, left_path=left, right_path=right))

    if isinstance(outcome, ContentDifference) and diff_output is not None:
        try:
            diff_output.mkdir(parents=True, exist_ok=True)
            for diff_image in outcome.diff_images:
                save_image(diff_image.image, diff_output / f"{diff_image.method.value.lower()}.png")
        except OSError as exc:
            fail(exc)

    if use_json:
        click.echo(json.dumps(_to_dict(outcome)))
    else:
        click.echo(_summary(outcome), err=isinstance(outcome, LeftRightError))

    if isinstance(outcome, LeftRightError):
        raise SystemExit(2)
    raise SystemExit(0 if isinstance(outcome, NoDifference) else 1)
