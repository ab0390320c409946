from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from buildtree.errors import (
    CleanIOError,
    CyclicDependencyError,
    DeclarationError,
    InvalidPathError,
    PermissionDeniedError,
    UnknownProjectError,
)

EXIT_IO = 1
EXIT_USAGE = 2


@dataclass(frozen=True, slots=True)
class ErrorInfo:
    code: str
    message: str
    exit_code: int = EXIT_IO
    details: dict[str, Any] | None = None


def map_exception(exc: BaseException) -> ErrorInfo:
    """
    Map exceptions into a standardized (code, message, exit code, details) record for the CLI.

    Filesystem failures exit with 1, bad input with 2.
    """
    if isinstance(exc, InvalidPathError):
        return ErrorInfo(code="INVALID_PATH", message=str(exc), exit_code=EXIT_USAGE)
    if isinstance(exc, DeclarationError):
        return ErrorInfo(code="DECLARATION", message=str(exc), exit_code=EXIT_USAGE)
    if isinstance(exc, UnknownProjectError):
        return ErrorInfo(code="UNKNOWN_PROJECT", message=str(exc), exit_code=EXIT_USAGE, details={"name": exc.name})
    if isinstance(exc, CyclicDependencyError):
        return ErrorInfo(
            code="CYCLIC_DEPENDENCY",
            message=f"Evaluation dependency cycle: {exc}",
            exit_code=EXIT_USAGE,
            details={"cycle": exc.cycle},
        )
    if isinstance(exc, PermissionDeniedError):
        return ErrorInfo(code="IO_PERMISSION", message=str(exc), details={"path": str(exc.path)})
    if isinstance(exc, CleanIOError):
        return ErrorInfo(code="IO_ERROR", message=str(exc), details={"path": str(exc.path)})
    if isinstance(exc, FileNotFoundError):
        return ErrorInfo(code="IO_NOT_FOUND", message=f"File not found: {exc}", exit_code=EXIT_USAGE)
    if isinstance(exc, FileExistsError):
        return ErrorInfo(code="IO_EXISTS", message=f"File already exists: {exc}", exit_code=EXIT_USAGE)
    if isinstance(exc, PermissionError):
        return ErrorInfo(code="IO_PERMISSION", message=str(exc))
    if isinstance(exc, OSError):
        return ErrorInfo(code="IO_ERROR", message=str(exc))

    # Generic fallback.
    return ErrorInfo(code="INTERNAL", message=str(exc) or exc.__class__.__name__)
