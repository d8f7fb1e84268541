from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import msgpack

from affected_apps.models import ClosureTable, DependencyGraph

SCHEMA_VERSION = 1


class ReportFileError(Exception):
    pass


@dataclass
class DependencyReport:
    """Snapshot of a workspace's dependency data, exported for other tools."""

    version: int = SCHEMA_VERSION
    npm_scope: str = ""
    graph: DependencyGraph = field(default_factory=dict)
    closure: ClosureTable = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "npm_scope": self.npm_scope,
            "graph": {k: list(v) for k, v in self.graph.items()},
            "closure": {k: sorted(v) for k, v in self.closure.items()},
        }

    @classmethod
    def from_dict(cls, data: dict) -> DependencyReport:
        version = data.get("version", 0)
        if version > SCHEMA_VERSION:
            raise ReportFileError(
                f"Report version {version} is newer than supported version {SCHEMA_VERSION}. "
                "Please update affected-apps."
            )
        return cls(
            version=version,
            npm_scope=data.get("npm_scope", ""),
            graph={k: list(v) for k, v in data.get("graph", {}).items()},
            closure={k: set(v) for k, v in data.get("closure", {}).items()},
        )


def load_report(path: Path) -> DependencyReport | None:
    if not path.exists():
        return None
    try:
        with open(path, "rb") as f:
            data = msgpack.unpack(f, raw=False)
    except (msgpack.UnpackException, msgpack.ExtraData, ValueError) as e:
        raise ReportFileError(f"Failed to load report file: {e}") from e
    if not isinstance(data, dict):
        raise ReportFileError(f"Failed to load report file: expected a map, got {type(data).__name__}")
    try:
        return DependencyReport.from_dict(data)
    except (TypeError, ValueError) as e:
        raise ReportFileError(f"Failed to load report file: {e}") from e


def save_report(path: Path, report: DependencyReport) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as f:
            msgpack.pack(report.to_dict(), f, use_bin_type=True)
    except (OSError, msgpack.PackException) as e:
        raise ReportFileError(f"Failed to save report file: {e}") from e
