from __future__ import annotations

import logging

import click

from snapdiff import __version__
from snapdiff.commands.compare import compare_cmd
from snapdiff.commands.report import report_cmd
from snapdiff.commands.review import review_cmd
from snapdiff.commands.size_check import size_check_cmd


def _configure_logging(ctx: click.Context, param: click.Parameter, value: int) -> None:
    """Route library logging to stderr; -v for INFO, -vv for DEBUG."""
    level = {0: logging.WARNING, 1: logging.INFO}.get(value, logging.DEBUG)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="snapdiff")
@click.option(
    "--verbose",
    "-v",
    count=True,
    expose_value=False,
    is_eager=True,
    callback=_configure_logging,
    help="Increase log verbosity (repeatable).",
)
def main() -> None:
    """snapdiff: visual regression diffs between two directories of PNG images."""


main.add_command(report_cmd, name="report")
main.add_command(review_cmd, name="review")
main.add_command(compare_cmd, name="compare")
main.add_command(size_check_cmd, name="size-check")


if __name__ == "__main__":
    main()
