from __future__ import annotations

import argparse
import json
import sys

from buildtree.errors import BuildTreeError, DeclarationError


def _add_declaration_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("-c", "--config", default=None, help="Declaration file or folder containing buildtree.json.")
    p.add_argument("--root", default=None, help="Root project folder (used instead of a declaration file).")
    p.add_argument(
        "--subproject",
        dest="subprojects",
        action="append",
        default=[],
        help="Subproject name (repeatable; only with --root).",
    )
    p.add_argument("--override", default=None, help="Output override relative to <root>/build (default: ../../build).")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="buildtree")
    sub = parser.add_subparsers(dest="cmd", required=True)

    sub.add_parser("about", help="Show basic project info.")
    init = sub.add_parser("init", help="Write an example buildtree.json.")
    init.add_argument("--out", default=None, help="Output file or folder (default: ./buildtree.json)")

    layout = sub.add_parser("layout", help="Print the relocated output directories.")
    _add_declaration_args(layout)
    layout.add_argument("--json", action="store_true", help="Print as JSON.")

    plan = sub.add_parser("plan", help="Print the subproject evaluation order.")
    _add_declaration_args(plan)

    clean = sub.add_parser("clean", help="Delete the relocated root output directory.")
    _add_declaration_args(clean)
    return parser


def _declaration(args: argparse.Namespace):
    from buildtree.project.declaration import DEFAULT_FILENAME, declaration_from_args, load_declaration

    if args.root is not None:
        if args.config is not None:
            raise DeclarationError("use either --config or --root, not both")
        return declaration_from_args(args.root, args.subprojects, args.override)
    if args.subprojects:
        raise DeclarationError("--subproject requires --root")

    decl = load_declaration(args.config or DEFAULT_FILENAME)
    if args.override is not None:
        from dataclasses import replace

        decl = replace(decl, output_override=args.override)
    return decl


def _run(args: argparse.Namespace) -> int:
    if args.cmd == "about":
        from buildtree import __version__

        print(f"buildtree {__version__}")
        return 0

    if args.cmd == "init":
        from buildtree.project.declaration import write_declaration_example

        print(write_declaration_example(args.out))
        return 0

    if args.cmd == "layout":
        from buildtree.layout.relocate import build_output_layout

        layout = build_output_layout(_declaration(args))
        if args.json:
            print(json.dumps(layout.to_dict(), indent=2, ensure_ascii=False))
        else:
            print(f"root: {layout.root_output_dir}")
            for name, path in layout.subproject_dirs.items():
                print(f"{name}: {path}")
        return 0

    if args.cmd == "plan":
        from buildtree.project.evaluation import plan_evaluation_order

        for node in plan_evaluation_order(_declaration(args)):
            print(node.name)
        return 0

    if args.cmd == "clean":
        from buildtree.layout.clean import clean
        from buildtree.layout.relocate import resolve_root_output_dir

        decl = _declaration(args)
        root_out = resolve_root_output_dir(decl.root_path, decl.output_override)
        result = clean(root_out, protected=[decl.root_path])
        print(f"Removed {result.path}" if result.removed else f"Nothing to clean at {result.path}")
        return 0

    raise SystemExit(f"Unknown command: {args.cmd}")


def main(argv: list[str] | None = None) -> int:
    from buildtree.app.error_mapping import map_exception
    from buildtree.util.logging import configure_logging

    configure_logging()
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        return _run(args)
    except (BuildTreeError, OSError) as exc:
        info = map_exception(exc)
        print(f"error [{info.code}]: {info.message}", file=sys.stderr)
        return info.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
