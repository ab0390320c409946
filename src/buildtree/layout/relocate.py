from __future__ import annotations

import logging
import os
from pathlib import Path

from buildtree.errors import InvalidPathError
from buildtree.project.types import OutputLayout, ProjectDeclaration

logger = logging.getLogger(__name__)

# Default build directory of a project before relocation: <root>/build
NATURAL_BUILD_DIRNAME = "build"


def _as_path_text(value: object, what: str) -> str:
    if isinstance(value, os.PathLike):
        value = os.fspath(value)
    if not isinstance(value, str):
        raise InvalidPathError(f"{what} must be a path, got {type(value).__name__}")
    if not value.strip():
        raise InvalidPathError(f"{what} is empty")
    if "\x00" in value:
        raise InvalidPathError(f"{what} contains a NUL byte: {value!r}")
    return value


def is_anchor(path: Path) -> bool:
    p = Path(path)
    return bool(p.anchor) and p == Path(p.anchor)


def resolve_root_output_dir(base_root_path: str | os.PathLike[str], override_path: str | os.PathLike[str]) -> Path:
    """
    Resolve the relocated root output directory.

    The override is taken relative to the root's natural build directory (`<root>/build`), so
    `/work/app/android` + `../../build` gives `/work/app/build`. Normalization is lexical: no
    filesystem access and symlinks are not followed.
    """
    root = _as_path_text(base_root_path, "root path")
    override = _as_path_text(override_path, "output override")

    natural = os.path.join(os.path.abspath(root), NATURAL_BUILD_DIRNAME)
    resolved = Path(os.path.normpath(os.path.join(natural, override)))
    if is_anchor(resolved):
        raise InvalidPathError(f"output override {override!r} resolves to filesystem root {resolved}")
    logger.debug("Root output dir: %s (root=%s, override=%s)", resolved, root, override)
    return resolved


def validate_subproject_name(name: object) -> str:
    text = _as_path_text(name, "subproject name")
    if text in (".", ".."):
        raise InvalidPathError(f"subproject name may not be {text!r}")
    seps = {"/", os.sep}
    if os.altsep:
        seps.add(os.altsep)
    if any(s in text for s in seps):
        raise InvalidPathError(f"subproject name may not contain a path separator: {text!r}")
    return text


def resolve_subproject_output_dir(root_output_dir: str | os.PathLike[str], subproject_name: str) -> Path:
    """
    Output directory of one subproject: always a direct child of `root_output_dir`.
    """
    name = validate_subproject_name(subproject_name)
    out = Path(root_output_dir) / name
    logger.debug("Subproject %s -> %s", name, out)
    return out


def build_output_layout(declaration: ProjectDeclaration) -> OutputLayout:
    root_out = resolve_root_output_dir(declaration.root_path, declaration.output_override)
    dirs: dict[str, Path] = {}
    for node in declaration.subprojects:
        if node.name in dirs:
            raise InvalidPathError(f"duplicate subproject name: {node.name!r}")
        dirs[node.name] = resolve_subproject_output_dir(root_out, node.name)
    return OutputLayout(root_output_dir=root_out, subproject_dirs=dirs)
