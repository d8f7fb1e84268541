from __future__ import annotations

from dataclasses import dataclass, field

# project name -> directly referenced project names (duplicates allowed)
DependencyGraph = dict[str, list[str]]

# project name -> every project reachable from it, itself included
ClosureTable = dict[str, set[str]]


@dataclass(frozen=True)
class Project:
    """A named unit of source in the workspace.

    Names are expected to be unique and each file path is expected to be
    owned by at most one project. Neither is enforced here.
    """

    name: str
    is_app: bool = False
    files: tuple[str, ...] = field(default_factory=tuple)
