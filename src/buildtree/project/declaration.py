from __future__ import annotations

import json
import logging
from importlib.resources import files
from pathlib import Path
from typing import Any, Iterable

import jsonschema

from buildtree.errors import DeclarationError, InvalidPathError
from buildtree.layout.relocate import validate_subproject_name
from buildtree.project.types import DEFAULT_OUTPUT_OVERRIDE, ProjectDeclaration, ProjectNode

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "buildtree.json"
SCHEMA_VERSION = "0.1"


def _load_schema() -> dict[str, Any]:
    text = (files("buildtree.project.schemas") / "declaration.schema.json").read_text(encoding="utf-8")
    return json.loads(text)


def validate_declaration_data(data: Any) -> None:
    try:
        jsonschema.validate(instance=data, schema=_load_schema())
    except jsonschema.ValidationError as exc:
        where = "/".join(str(p) for p in exc.absolute_path) or "<root>"
        raise DeclarationError(f"{where}: {exc.message}") from exc

    seen: set[str] = set()
    for item in data["subprojects"]:
        name = item["name"]
        try:
            validate_subproject_name(name)
        except InvalidPathError as exc:
            raise DeclarationError(str(exc)) from exc
        if name in seen:
            raise DeclarationError(f"duplicate subproject name: {name!r}")
        seen.add(name)


def declaration_from_data(data: dict[str, Any], base_dir: Path) -> ProjectDeclaration:
    validate_declaration_data(data)
    root = Path(data.get("root", "."))
    if not root.is_absolute():
        root = Path(base_dir) / root
    nodes = tuple(
        ProjectNode(
            name=item["name"],
            relative_base_path=item.get("path", item["name"]),
            evaluation_depends_on=tuple(item.get("evaluation_depends_on", ())),
        )
        for item in data["subprojects"]
    )
    return ProjectDeclaration(
        root_path=root,
        subprojects=nodes,
        output_override=data.get("output_override", DEFAULT_OUTPUT_OVERRIDE),
    )


def load_declaration(path: str | Path) -> ProjectDeclaration:
    path = Path(path)
    if path.is_dir():
        path = path / DEFAULT_FILENAME
    if not path.exists():
        raise FileNotFoundError(path)
    # Accept UTF-8 with BOM (common on Windows editors).
    try:
        data = json.loads(path.read_text(encoding="utf-8-sig"))
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise DeclarationError(f"{path}: not a UTF-8 JSON file ({exc})") from exc
    decl = declaration_from_data(data, base_dir=path.parent)
    logger.debug("Loaded declaration %s (%d subprojects)", path, len(decl.subprojects))
    return decl


def declaration_from_args(
    root: str | Path,
    subprojects: Iterable[str] = (),
    override: str | None = None,
) -> ProjectDeclaration:
    """
    Build a declaration straight from command-line values (no file, no dependencies).
    """
    names = list(subprojects)
    data: dict[str, Any] = {
        "schema_version": SCHEMA_VERSION,
        "root": str(root),
        "subprojects": [{"name": n} for n in names],
    }
    if override is not None:
        data["output_override"] = override
    return declaration_from_data(data, base_dir=Path.cwd())


def example_declaration() -> dict[str, Any]:
    return {
        "schema_version": SCHEMA_VERSION,
        "root": ".",
        "output_override": DEFAULT_OUTPUT_OVERRIDE,
        "subprojects": [
            {"name": "app", "path": "app", "evaluation_depends_on": []},
        ],
    }


def write_declaration_example(out: str | Path | None = None) -> Path:
    out_path = Path(out) if out else Path(DEFAULT_FILENAME)
    if out_path.is_dir():
        out_path = out_path / DEFAULT_FILENAME
    if out_path.exists():
        raise FileExistsError(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(json.dumps(example_declaration(), indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    return out_path
