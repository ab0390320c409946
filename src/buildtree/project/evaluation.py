from __future__ import annotations

from buildtree.errors import CyclicDependencyError, UnknownProjectError
from buildtree.project.types import ProjectDeclaration, ProjectNode


def normalize_project_ref(ref: str) -> str:
    """
    Accept Gradle-style project paths (`:app`) as well as bare names (`app`).
    """
    return (ref or "").strip().lstrip(":")


def plan_evaluation_order(declaration: ProjectDeclaration) -> list[ProjectNode]:
    """
    Order subprojects so each one comes after the projects it depends on for evaluation.

    Stable: among independent projects, declaration order is kept.
    """
    by_name = {p.name: p for p in declaration.subprojects}
    for node in declaration.subprojects:
        for ref in node.evaluation_depends_on:
            if normalize_project_ref(ref) not in by_name:
                raise UnknownProjectError(normalize_project_ref(ref))

    order: list[ProjectNode] = []
    done: set[str] = set()
    stack: list[str] = []

    def visit(name: str) -> None:
        if name in done:
            return
        if name in stack:
            cycle = stack[stack.index(name):] + [name]
            raise CyclicDependencyError(cycle)
        stack.append(name)
        node = by_name[name]
        for ref in node.evaluation_depends_on:
            dep = normalize_project_ref(ref)
            if dep == name:
                continue
            visit(dep)
        stack.pop()
        done.add(name)
        order.append(node)

    for node in declaration.subprojects:
        visit(node.name)
    return order
