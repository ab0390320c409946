from __future__ import annotations

from pathlib import Path


class BuildTreeError(Exception):
    pass


class InvalidPathError(BuildTreeError, ValueError):
    """
    Raised when an output path cannot be composed (empty, NUL byte, escaping name, anchor target).
    """


class DeclarationError(BuildTreeError, ValueError):
    pass


class UnknownProjectError(BuildTreeError, KeyError):
    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Unknown project: {self.name!r}"


class CyclicDependencyError(BuildTreeError):
    def __init__(self, cycle: list[str]) -> None:
        super().__init__(" -> ".join(cycle))
        self.cycle = list(cycle)


class CleanError(BuildTreeError, OSError):
    """
    Filesystem failure while removing an output tree. `path` names what could not be removed.
    """

    def __init__(self, path: Path, message: str, errno: int | None = None) -> None:
        super().__init__(errno, message, str(path))
        self.path = Path(path)

    def __str__(self) -> str:
        return f"Could not remove {self.path}: {self.strerror}"


class PermissionDeniedError(CleanError):
    pass


class CleanIOError(CleanError):
    pass
