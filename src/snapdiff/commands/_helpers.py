"""Shared CLI options and helpers."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

import click

from snapdiff.diff.dirs import DirDiffConfig
from snapdiff.errors import SnapdiffError
from snapdiff.report import ReportConfig

__all__ = ["diff_options", "make_configs", "fail"]

F = TypeVar("F", bound=Callable[..., Any])

_DIR = click.Path(file_okay=False, path_type=Path)


def diff_options(func: F) -> F:
    """Attach the arguments and options shared by ``report`` and ``review``."""
    options = [
        click.argument("left_path", type=_DIR),
        click.argument("right_path", type=_DIR),
        click.option("--left-title", default="Left image", show_default=True, help="Left title."),
        click.option(
            "--right-title", default="Right image", show_default=True, help="Right title."
        ),
        click.option("--filter", "filter_name", default=None, help="Keep names containing TEXT."),
        click.option("--ignore-left-missing", is_flag=True, help="Skip files missing on the left."),
        click.option(
            "--ignore-right-missing", is_flag=True, help="Skip files missing on the right."
        ),
        click.option(
            "--ignore-match/--no-ignore-match",
            default=True,
            show_default=True,
            help="Leave identical images out of the result.",
        ),
        click.option(
            "--recursive/--no-recursive",
            default=True,
            show_default=True,
            help="Descend into subdirectories.",
        ),
        click.option(
            "--jobs",
            "-j",
            type=click.IntRange(min=1),
            default=None,
            envvar="SNAPDIFF_JOBS",
            help="Worker threads (default: CPU based).",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def make_configs(
    left_path: Path,
    right_path: Path,
    left_title: str,
    right_title: str,
    filter_name: str | None,
    ignore_left_missing: bool,
    ignore_right_missing: bool,
    ignore_match: bool,
    recursive: bool,
    jobs: int | None,
) -> tuple[DirDiffConfig, ReportConfig]:
    """Split the shared CLI options into diff and report configuration."""
    diff_config = DirDiffConfig(
        left_path=left_path,
        right_path=right_path,
        filter_name=filter_name,
        ignore_match=ignore_match,
        ignore_left_missing=ignore_left_missing,
        ignore_right_missing=ignore_right_missing,
        recursive=recursive,
        jobs=jobs,
    )
    report_config = ReportConfig(left_title=left_title, right_title=right_title)
    return diff_config, report_config


def fail(exc: SnapdiffError | OSError) -> None:
    """Print *exc* as a CLI error and exit with status 2."""
    click.echo(f"error: {exc}", err=True)
    raise SystemExit(2)
