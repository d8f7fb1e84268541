from __future__ import annotations

import dataclasses
import logging
import re
from typing import Any, Callable, Iterable, Sequence

from affected_apps.models import ClosureTable, DependencyGraph, Project
from affected_apps.references import extract_references, parse_typescript

logger = logging.getLogger(__name__)

_SEPARATORS = re.compile(r"[\\/]+")


def normalize_path(path: str) -> str:
    """Collapse every run of slashes or backslashes into a single ``/``."""
    return _SEPARATORS.sub("/", path)


def normalize_files(files: Iterable[str]) -> list[str]:
    return [normalize_path(f) for f in files]


def normalize_projects(projects: Iterable[Project]) -> list[Project]:
    """Return copies of ``projects`` with normalized file paths, same order."""
    return [
        dataclasses.replace(p, files=tuple(normalize_files(p.files)))
        for p in projects
    ]


def order_for_resolution(projects: Iterable[Project]) -> list[str]:
    """
    Project names ordered longest first, for reference resolution only.

    When one name is a path prefix of another (``shared`` and ``shared/ui``)
    a reference such as ``@org/shared/ui/button`` matches both; trying the
    longer name first makes the more specific project win. The sort is
    stable, so equal-length names keep their input order.
    """
    return sorted((p.name for p in projects), key=len, reverse=True)


def resolve_specifier(
    reference: str, scope: str, project_names: Sequence[str]
) -> str | None:
    for name in project_names:
        base = f"@{scope}/{name}"
        if (
            reference == base
            or reference.startswith(base + "#")
            or reference.startswith(base + "/")
        ):
            return name
    return None


def build_dependency_graph(
    scope: str,
    projects: Sequence[Project],
    read_file: Callable[[str], str],
    parse: Callable[[str], Any] = parse_typescript,
) -> DependencyGraph:
    """
    Direct project -> project edges, one entry per resolved reference.

    Repeated edges are kept. Errors raised by ``read_file`` are not caught,
    so a single unreadable file aborts the whole build.
    """
    names = order_for_resolution(projects)
    graph: DependencyGraph = {p.name: [] for p in projects}

    for project in projects:
        edges = graph[project.name]
        for path in project.files:
            for reference in extract_references(path, read_file, parse):
                match = resolve_specifier(reference, scope, names)
                if match is None:
                    continue
                logger.debug("%s -> %s (%s in %s)", project.name, match, reference, path)
                edges.append(match)
        logger.debug("%s: %d direct reference(s)", project.name, len(edges))

    return graph


def _reachable(graph: DependencyGraph, start: str) -> set[str]:
    reached = {start}
    # Ancestors of the node being expanded, root first
    path = [start]
    on_path = {start}
    pending = [iter(graph.get(start, ()))]

    while pending:
        dep = next(pending[-1], None)
        if dep is None:
            pending.pop()
            on_path.discard(path.pop())
            continue
        if dep in on_path:
            continue  # cycle
        if dep in reached:
            continue
        reached.add(dep)
        path.append(dep)
        on_path.add(dep)
        pending.append(iter(graph.get(dep, ())))

    return reached


def transitive_closure(graph: DependencyGraph) -> ClosureTable:
    """
    Expand direct edges into the full reachable set of every project.

    Each set contains its own project. Cycles stop expanding where a branch
    re-enters one of its ancestors, so cyclic graphs terminate.
    """
    return {name: _reachable(graph, name) for name in graph}
