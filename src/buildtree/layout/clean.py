from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from buildtree.errors import CleanIOError, InvalidPathError, PermissionDeniedError
from buildtree.layout.relocate import is_anchor

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CleanResult:
    path: Path
    removed: bool


def _absolute(path: str | os.PathLike[str]) -> Path:
    return Path(os.path.normpath(os.path.abspath(os.fspath(path))))


def _real_target(target: Path) -> Path:
    # Ancestors are resolved through symlinks; a symlink in the last component is unlinked, not followed.
    return Path(os.path.realpath(target.parent)) / target.name


def _check_target(target: Path, protected: Iterable[str | os.PathLike[str]]) -> None:
    real = _real_target(target)
    if is_anchor(target) or is_anchor(real):
        raise InvalidPathError(f"refusing to clean filesystem root: {target}")
    for p in protected:
        keep = _absolute(p)
        real_keep = Path(os.path.realpath(keep))
        if keep == target or target in keep.parents or real_keep == real or real in real_keep.parents:
            raise InvalidPathError(f"refusing to clean {target}: it contains protected path {keep}")


def clean(
    root_output_dir: str | os.PathLike[str],
    *,
    protected: Iterable[str | os.PathLike[str]] = (),
) -> CleanResult:
    """
    Recursively delete the output tree at `root_output_dir`.

    A missing path is a successful no-op. Symlinks are unlinked, never followed.
    Failures are raised as PermissionDeniedError / CleanIOError and not retried.
    """
    target = _absolute(root_output_dir)
    _check_target(target, protected)

    if not os.path.lexists(target):
        logger.info("Nothing to clean at %s", target)
        return CleanResult(path=target, removed=False)

    try:
        if target.is_symlink() or not target.is_dir():
            target.unlink()
        else:
            shutil.rmtree(target)
    except FileNotFoundError as exc:
        # Success only if the whole tree is gone.
        if os.path.lexists(target):
            failed = Path(exc.filename) if exc.filename else target
            raise CleanIOError(failed, exc.strerror or str(exc), exc.errno) from exc
        removed = bool(exc.filename) and _absolute(exc.filename) != target
        logger.info("Removed %s" if removed else "Nothing to clean at %s", target)
        return CleanResult(path=target, removed=removed)
    except PermissionError as exc:
        failed = Path(exc.filename) if exc.filename else target
        raise PermissionDeniedError(failed, exc.strerror or str(exc), exc.errno) from exc
    except OSError as exc:
        failed = Path(exc.filename) if exc.filename else target
        raise CleanIOError(failed, exc.strerror or str(exc), exc.errno) from exc

    logger.info("Removed %s", target)
    return CleanResult(path=target, removed=True)
