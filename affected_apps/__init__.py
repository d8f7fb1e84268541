from affected_apps.affected import compute_affected_apps, compute_dependencies
from affected_apps.models import ClosureTable, DependencyGraph, Project

__version__ = "0.1.0"

__all__ = [
    "ClosureTable",
    "DependencyGraph",
    "Project",
    "compute_affected_apps",
    "compute_dependencies",
]
