"""Map touched files to the app projects that have to be rebuilt."""

from __future__ import annotations

import logging
from typing import Any, Callable, Sequence

from affected_apps.graph import (
    build_dependency_graph,
    normalize_files,
    normalize_projects,
    transitive_closure,
)
from affected_apps.models import ClosureTable, Project
from affected_apps.references import parse_typescript

logger = logging.getLogger(__name__)


def compute_dependencies(
    scope: str,
    projects: Sequence[Project],
    read_file: Callable[[str], str],
    parse: Callable[[str], Any] = parse_typescript,
) -> ClosureTable:
    """Transitive dependencies of every project, each including itself."""
    projects = normalize_projects(projects)
    graph = build_dependency_graph(scope, projects, read_file, parse)
    return transitive_closure(graph)


def owning_projects(
    projects: Sequence[Project], touched_files: Sequence[str]
) -> list[str | None]:
    """
    Owner name of each touched file, ``None`` when no project lists it.

    When a path is listed by several projects the first one in ``projects``
    wins.
    """
    owners: dict[str, str] = {}
    for project in projects:
        for path in project.files:
            owners.setdefault(path, project.name)
    return [owners.get(path) for path in touched_files]


def select_affected_apps(
    closure: ClosureTable,
    projects: Sequence[Project],
    touched_files: Sequence[str],
) -> list[str]:
    """
    App names whose closure intersects the projects owning ``touched_files``.

    ``projects`` and ``touched_files`` must already be normalized. A touched
    file owned by no project could belong anywhere, so every app is returned.
    """
    apps = [p.name for p in projects if p.is_app]
    owners = owning_projects(projects, touched_files)

    untracked = [f for f, owner in zip(touched_files, owners) if owner is None]
    if untracked:
        logger.warning(
            "%d touched file(s) belong to no project (first: %s); "
            "treating all %d app(s) as affected",
            len(untracked),
            untracked[0],
            len(apps),
        )
        return apps

    touched = {owner for owner in owners if owner is not None}
    logger.debug("touched projects: %s", sorted(touched))
    return [name for name in apps if not closure[name].isdisjoint(touched)]


def compute_affected_apps(
    scope: str,
    projects: Sequence[Project],
    read_file: Callable[[str], str],
    touched_files: Sequence[str],
    parse: Callable[[str], Any] = parse_typescript,
) -> list[str]:
    """
    Names of the app projects affected by ``touched_files``.

    The result has set semantics and follows the order of ``projects``.
    Failures from ``read_file`` propagate.
    """
    projects = normalize_projects(projects)
    touched = list(dict.fromkeys(normalize_files(touched_files)))
    graph = build_dependency_graph(scope, projects, read_file, parse)
    return select_affected_apps(transitive_closure(graph), projects, touched)
