"""snapdiff size-check: find PNG files that could be stored smaller."""

from __future__ import annotations

from pathlib import Path

import click

from snapdiff.commands._helpers import fail
from snapdiff.errors import SnapdiffError
from snapdiff.optimize import OptimizationResult, check_size_optimizations


def _format_size(n: int) -> str:
    """Decimal (kB/MB) human-readable size."""
    value = float(n)
    for unit in ("B", "kB", "MB"):
        if value < 1000 or unit == "MB":
            return f"{value:.0f} {unit}" if unit == "B" else f"{value:.2f} {unit}"
        value /= 1000
    raise AssertionError("unreachable")


def _print_results(results: list[OptimizationResult], optimize: bool) -> bool:
    """Print one line per file plus totals; return True if a limit was breached."""
    if not results:
        click.echo("Nothing to optimize")
        return False
    total_size = 0
    total_diff = 0
    has_error = False
    for r in results:
        diff = r.old_size - r.new_size
        click.echo(
            f"{r.path}: "
            + click.style(f"{_format_size(r.new_size)} ", fg="cyan")
            + click.style(f"(-{_format_size(diff)})", fg="green")
        )
        total_size += r.new_size
        total_diff += diff
        if r.size_limit_breached:
            click.secho("Size limit breached", fg="red")
            has_error = True
        if r.improvement_limit_breached:
            click.secho("Improvement limit breached", fg="red")
            has_error = True
    click.echo("----------------------------")
    click.echo(
        "Total size: "
        + click.style(f"{_format_size(total_size)} ", fg="cyan")
        + click.style(f"(-{_format_size(total_diff)})", fg="green")
    )
    if not optimize:
        click.echo(
            "Run with " + click.style("--optimize", fg="yellow") + " to apply the optimizations"
        )
    return has_error


@click.command("size-check")
@click.argument("path", type=click.Path(file_okay=False, path_type=Path))
@click.option("--optimize", is_flag=True, help="Replace images with their optimized version.")
@click.option(
    "--size-limit",
    type=click.IntRange(min=0),
    default=None,
    metavar="KIB",
    help="Fail if an image is larger than KIB (optimized size with --optimize).",
)
@click.option(
    "--improvement-limit",
    type=click.FloatRange(0.0, 1.0),
    default=None,
    metavar="RATIO",
    help="Fail if an image can shrink by more than RATIO of its size.",
)
@click.option("--jobs", "-j", type=click.IntRange(min=1), default=None, envvar="SNAPDIFF_JOBS")
def size_check_cmd(
    path: Path,
    optimize: bool,
    size_limit: int | None,
    improvement_limit: float | None,
    jobs: int | None,
) -> None:
    """Check whether PNG files under PATH can be optimized.

    Exit 1 if a limit is breached, or if files can be optimized and
    --optimize was not given.
    """
    try:
        results = check_size_optimizations(
            path,
            optimize=optimize,
            size_limit_kib=size_limit,
            improvement_limit=improvement_limit,
            jobs=jobs,
        )
    except SnapdiffError as exc:
        fail(exc)
    has_error = _print_results(results, optimize)
    if has_error or (results and not optimize):
        raise SystemExit(1)
