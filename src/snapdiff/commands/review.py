"""snapdiff review: serve an interactive report with an accept button."""

from __future__ import annotations

from typing import Any

import click

from snapdiff.commands._helpers import diff_options, fail, make_configs
from snapdiff.diff.dirs import pairs_from_paths
from snapdiff.errors import SnapdiffError
from snapdiff.server import DEFAULT_PORT, run_review_server


@click.command("review")
@diff_options
@click.option("--host", default="127.0.0.1", show_default=True, help="Bind address.")
@click.option(
    "--port",
    default=DEFAULT_PORT,
    show_default=True,
    envvar="SNAPDIFF_PORT",
    type=click.IntRange(1, 65535),
    help="Listen port.",
)
def review_cmd(host: str, port: int, **kwargs: Any) -> None:
    """Serve the comparison of LEFT_PATH and RIGHT_PATH for review.

    Accepting a case copies the right image over the left one.
    """
    diff_config, report_config = make_configs(**kwargs)
    try:
        # fail fast on bad directories instead of on the first page load
        pairs_from_paths(diff_config.left_path, diff_config.right_path)
    except SnapdiffError as exc:
        fail(exc)
    click.echo(f"Running at http://{host}:{port}")
    run_review_server(diff_config, report_config, host=host, port=port)
