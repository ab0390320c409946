from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

from buildtree.errors import UnknownProjectError

DEFAULT_OUTPUT_OVERRIDE = "../../build"


@dataclass(frozen=True, slots=True)
class ProjectNode:
    name: str
    relative_base_path: str
    evaluation_depends_on: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ProjectDeclaration:
    root_path: Path
    subprojects: tuple[ProjectNode, ...] = ()
    output_override: str = DEFAULT_OUTPUT_OVERRIDE

    def names(self) -> list[str]:
        return [p.name for p in self.subprojects]


@dataclass(frozen=True, slots=True)
class OutputLayout:
    """
    Output directories resolved for one invocation. Passed around by value, never mutated.
    """

    root_output_dir: Path
    subproject_dirs: Mapping[str, Path] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "subproject_dirs", MappingProxyType(dict(self.subproject_dirs)))

    def dir_for(self, name: str) -> Path:
        try:
            return self.subproject_dirs[name]
        except KeyError:
            raise UnknownProjectError(name) from None

    def to_dict(self) -> dict[str, object]:
        return {
            "root_output_dir": str(self.root_output_dir),
            "subprojects": {k: str(v) for k, v in self.subproject_dirs.items()},
        }
