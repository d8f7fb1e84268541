"""Load the workspace manifest that lists projects and their files."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from affected_apps.models import Project

SKIP_DIRS = frozenset({
    "node_modules",
    "dist",
    "build",
    "coverage",
    "tmp",
    ".git",
    ".hg",
    ".svn",
    ".angular",
    ".cache",
})

APPLICATION = "application"
LIBRARY = "library"


class WorkspaceError(Exception):
    pass


@dataclass
class Workspace:
    npm_scope: str
    projects: list[Project] = field(default_factory=list)


def discover_files(root: Path, project_root: str) -> list[str]:
    """Repo-relative POSIX paths of every file under ``project_root``."""
    base = root / project_root
    if not base.is_dir():
        return []
    result: list[str] = []
    for path in sorted(base.rglob("*")):
        if not path.is_file():
            continue
        parts = path.relative_to(root).parts
        if any(part in SKIP_DIRS for part in parts[:-1]):
            continue
        result.append(path.relative_to(root).as_posix())
    return result


def _is_app(name: str, spec: dict) -> bool:
    project_type = spec.get("projectType")
    if project_type is None:
        return str(spec.get("root", "")).replace("\\", "/").startswith("apps/")
    if project_type not in (APPLICATION, LIBRARY):
        raise WorkspaceError(
            f"Project {name!r} has unknown projectType {project_type!r}"
        )
    return project_type == APPLICATION


def _parse_project(root: Path, name: str, spec: object) -> Project:
    if not isinstance(spec, dict):
        raise WorkspaceError(f"Project {name!r} must be an object")

    files = spec.get("files")
    if files is None:
        project_root = spec.get("root")
        if not isinstance(project_root, str) or not project_root:
            raise WorkspaceError(f"Project {name!r} needs a 'root' or a 'files' list")
        files = discover_files(root, project_root)
    elif not isinstance(files, list) or not all(isinstance(f, str) for f in files):
        raise WorkspaceError(f"Project {name!r} has an invalid 'files' list")

    return Project(name=name, is_app=_is_app(name, spec), files=tuple(files))


def load_workspace(root: Path, workspace_file: Path) -> Workspace:
    try:
        data = json.loads(workspace_file.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise WorkspaceError(f"Workspace file not found: {workspace_file}") from e
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise WorkspaceError(f"Failed to load workspace file: {e}") from e

    if not isinstance(data, dict):
        raise WorkspaceError("Workspace file must contain a JSON object")

    npm_scope = data.get("npmScope")
    if not isinstance(npm_scope, str) or not npm_scope:
        raise WorkspaceError("Workspace file is missing 'npmScope'")

    projects = data.get("projects", {})
    if not isinstance(projects, dict):
        raise WorkspaceError("'projects' must map project names to objects")

    return Workspace(
        npm_scope=npm_scope,
        projects=[_parse_project(root, name, spec) for name, spec in projects.items()],
    )


def read_workspace_file(root: Path) -> Callable[[str], str]:
    """A ``read_file`` callable resolving paths against the workspace root."""

    def read_file(path: str) -> str:
        return (root / path).read_text(encoding="utf-8")

    return read_file
