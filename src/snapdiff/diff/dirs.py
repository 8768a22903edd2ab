"""Directory pairing and batch comparison."""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import NoReturn

from snapdiff.diff.images import ImageDifference, NoDifference, compare_images
from snapdiff.errors import ErrorKind, LeftRightError, LoadError, SnapdiffError
from snapdiff.image import load_image

log = logging.getLogger(__name__)

IMAGE_SUFFIX = ".png"


@dataclass(frozen=True)
class Pair:
    """Left/right file correspondence keyed by relative path."""

    title: str
    left_path: Path
    right_path: Path


@dataclass(frozen=True)
class PairResult:
    title: str
    left_path: Path
    right_path: Path
    outcome: ImageDifference | LeftRightError

    @property
    def error(self) -> LeftRightError | None:
        return self.outcome if isinstance(self.outcome, LeftRightError) else None

    @property
    def left_error(self) -> LoadError | None:
        return self.error.left if self.error else None

    @property
    def right_error(self) -> LoadError | None:
        return self.error.right if self.error else None


@dataclass(frozen=True)
class DirDiff:
    results: tuple[PairResult, ...]


@dataclass(frozen=True)
class DirDiffConfig:
    """Everything needed to run one directory comparison."""

    left_path: Path
    right_path: Path
    filter_name: str | None = None
    ignore_match: bool = True
    ignore_left_missing: bool = False
    ignore_right_missing: bool = False
    recursive: bool = True
    jobs: int | None = None

    def create_diff(self) -> DirDiff:
        return create_diff(self)


def _raise_walk_error(exc: OSError) -> NoReturn:
    raise SnapdiffError(ErrorKind.IO_ERROR, exc.filename, f"IO error: {exc}") from exc


def list_image_dir(root: Path, *, recursive: bool = True) -> Iterator[Path]:
    """Yield every ``.png`` file (any letter case) under *root*.

    Raises:
        SnapdiffError: ``IO_ERROR`` if a directory cannot be enumerated.
    """
    if not recursive:
        try:
            entries = sorted(root.iterdir())
        except OSError as exc:
            _raise_walk_error(exc)
        for entry in entries:
            if entry.suffix.lower() == IMAGE_SUFFIX and entry.is_file():
                yield entry
        return
    for dirpath, _dirnames, filenames in os.walk(root, onerror=_raise_walk_error):
        for name in filenames:
            path = Path(dirpath) / name
            if path.suffix.lower() == IMAGE_SUFFIX and path.is_file():
                yield path


def list_image_dir_names(root: Path, *, recursive: bool = True) -> Iterator[str]:
    """Like :func:`list_image_dir`, but yield POSIX paths relative to *root*."""
    for path in list_image_dir(root, recursive=recursive):
        yield path.relative_to(root).as_posix()


def pairs_from_paths(
    left_path: Path,
    right_path: Path,
    filter_name: str | None = None,
    *,
    recursive: bool = True,
) -> list[Pair]:
    """Pair up the images of two directories by relative path.

    Names are the sorted, deduplicated union of both sides; a pair exists even
    when the file is present on one side only.

    Raises:
        SnapdiffError: ``NOT_DIRECTORY`` if either root is not a directory.
    """
    for root in (left_path, right_path):
        if not root.is_dir():
            raise SnapdiffError(ErrorKind.NOT_DIRECTORY, root, f"Not a directory: `{root}`")

    names = set(list_image_dir_names(left_path, recursive=recursive))
    names.update(list_image_dir_names(right_path, recursive=recursive))
    return [
        Pair(title=name, left_path=left_path / name, right_path=right_path / name)
        for name in sorted(names)
        if filter_name is None or filter_name in name
    ]


def compute_pair_diff(pair: Pair) -> ImageDifference | LeftRightError:
    """Load both sides of *pair* and compare them.

    Load failures are returned, tagged with the failing side(s).
    """
    left = load_image(pair.left_path)
    right = load_image(pair.right_path)
    left_err = left if isinstance(left, LoadError) else None
    right_err = right if isinstance(right, LoadError) else None
    if left_err or right_err:
        return LeftRightError(left=left_err, right=right_err)
    return compare_images(left, right)  # type: ignore[arg-type]


def _keep(config: DirDiffConfig, outcome: ImageDifference | LeftRightError) -> bool:
    if isinstance(outcome, NoDifference):
        return not config.ignore_match
    if isinstance(outcome, LeftRightError):
        if config.ignore_left_missing and outcome.is_left_missing:
            return False
        if config.ignore_right_missing and outcome.is_right_missing:
            return False
    return True


def create_diff(config: DirDiffConfig) -> DirDiff:
    """Compare every pair of the configured directories.

    Pairs are processed on a thread pool; results keep the pairing order no
    matter which worker finishes first.
    """
    pairs = pairs_from_paths(
        config.left_path,
        config.right_path,
        config.filter_name,
        recursive=config.recursive,
    )
    log.debug("comparing %d pairs", len(pairs))

    outcomes: list[ImageDifference | LeftRightError | None] = [None] * len(pairs)
    with ThreadPoolExecutor(max_workers=config.jobs) as pool:
        futures = {pool.submit(compute_pair_diff, pair): idx for idx, pair in enumerate(pairs)}
        for future in as_completed(futures):
            outcomes[futures[future]] = future.result()

    results = []
    for pair, outcome in zip(pairs, outcomes):
        assert outcome is not None
        if not _keep(config, outcome):
            continue
        results.append(
            PairResult(
                title=pair.title,
                left_path=pair.left_path,
                right_path=pair.right_path,
                outcome=outcome,
            )
        )
    return DirDiff(results=tuple(results))


def validate_accepted_name(name: str) -> PurePosixPath:
    """Check that *name* is a relative path that stays inside its root.

    Raises:
        ValueError: If the name is empty, absolute, drive-qualified, has a
            ``..`` segment or cannot be used as a file name at all.
    """
    if not name or name.startswith(("/", "\\")) or "\x00" in name:
        raise ValueError(f"invalid name: {name!r}")
    try:
        os.fsencode(name)
    except UnicodeEncodeError as exc:
        raise ValueError(f"invalid name: {name!r}") from exc
    win = PureWindowsPath(name)
    if win.drive or win.root:
        raise ValueError(f"invalid name: {name!r}")
    parts = name.replace("\\", "/").split("/")
    if any(part == ".." for part in parts):
        raise ValueError(f"invalid name: {name!r}")
    kept = [p for p in parts if p not in ("", ".")]
    if not kept:
        raise ValueError(f"invalid name: {name!r}")
    return PurePosixPath(*kept)


def accept_pairs(config: DirDiffConfig, names: Iterable[str]) -> list[Path]:
    """Copy the right image over the left one for every accepted name.

    All names are validated before anything is copied.

    Raises:
        ValueError: If any name fails validation (nothing is copied).
        SnapdiffError: ``IO_ERROR`` if a copy fails.
    """
    relative = [validate_accepted_name(name) for name in names]
    copied = []
    for rel in relative:
        source = config.right_path / rel
        target = config.left_path / rel
        log.info("updating %s -> %s", source, target)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, target)
        except OSError as exc:
            log.error("failed to copy %s: %s", source, exc)
            raise SnapdiffError(ErrorKind.IO_ERROR, source, f"IO error: {exc}") from exc
        copied.append(target)
    return copied
