"""Error kinds shared by the diff engine and its front-ends."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class ErrorKind(str, Enum):
    """Kind of failure, one per recoverable or fatal condition."""

    NOT_DIRECTORY = "not_directory"
    FILE_NOT_FOUND = "file_not_found"
    DECODE_ERROR = "decode_error"
    EXTERNAL_POINTER_STUB = "external_pointer_stub"
    IO_ERROR = "io_error"


@dataclass(frozen=True)
class LoadError:
    """Failure to load one side of a pair. Carried as a value, never raised."""

    kind: ErrorKind
    path: Path
    message: str

    @property
    def is_missing(self) -> bool:
        return self.kind is ErrorKind.FILE_NOT_FOUND

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class LeftRightError:
    """Load failure of a pair, tagged with the failing side(s)."""

    left: LoadError | None = None
    right: LoadError | None = None

    def __post_init__(self) -> None:
        if self.left is None and self.right is None:
            raise ValueError("LeftRightError needs at least one side")

    @property
    def side(self) -> str:
        if self.left is not None and self.right is not None:
            return "both"
        return "left" if self.left is not None else "right"

    @property
    def is_left_missing(self) -> bool:
        return self.left is not None and self.left.is_missing

    @property
    def is_right_missing(self) -> bool:
        return self.right is not None and self.right.is_missing

    @property
    def is_missing_file_error(self) -> bool:
        """True when exactly one side failed, and it failed by being absent."""
        if self.side == "both":
            return False
        err = self.left or self.right
        assert err is not None
        return err.is_missing


class SnapdiffError(Exception):
    """Fatal error that aborts a whole batch (or a whole accept request)."""

    def __init__(self, kind: ErrorKind, path: Path | str | None, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.path = Path(path) if path is not None else None

    def to_load_error(self) -> LoadError:
        return LoadError(kind=self.kind, path=self.path or Path(), message=str(self))
