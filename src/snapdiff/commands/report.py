"""snapdiff report: write an HTML comparison report."""

from __future__ import annotations

import dataclasses
from pathlib import Path
from typing import Any

import click

from snapdiff.commands._helpers import diff_options, fail, make_configs
from snapdiff.diff.dirs import create_diff
from snapdiff.errors import SnapdiffError
from snapdiff.report import render_html_report


@click.command("report")
@diff_options
@click.option(
    "--output",
    "-o",
    default="report.html",
    show_default=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output filename.",
)
@click.option("--embed-images", is_flag=True, help="Embed images into the report.")
@click.option("--optimize-size", is_flag=True, help="Re-encode embedded PNGs smaller.")
def report_cmd(output: Path, embed_images: bool, optimize_size: bool, **kwargs: Any) -> None:
    """Compare LEFT_PATH and RIGHT_PATH and write an HTML report."""
    diff_config, report_config = make_configs(**kwargs)
    report_config = dataclasses.replace(
        report_config, embed_images=embed_images, optimize_size=optimize_size
    )
    try:
        diff = create_diff(diff_config)
        html = render_html_report(report_config, diff.results)
        output.write_text(html, encoding="utf-8")
    except (SnapdiffError, OSError) as exc:
        fail(exc)
    click.echo(f"Report written into '{output}'")
