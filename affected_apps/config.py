from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

WORKSPACE_FILE = "workspace.json"


@dataclass
class AffectedConfig:
    root_path: Path = field(default_factory=Path.cwd)
    workspace_file: Path = field(default_factory=lambda: Path(WORKSPACE_FILE))
    scope: str | None = None
    debug: bool = False

    @classmethod
    def from_options(
        cls,
        root_path: Path | str | None = None,
        workspace_file: Path | str | None = None,
        scope: str | None = None,
        debug: bool = False,
    ) -> AffectedConfig:
        root = Path(root_path) if root_path is not None else Path.cwd()

        if workspace_file is not None:
            workspace = Path(workspace_file)
            if not workspace.is_absolute():
                workspace = root / workspace
        else:
            workspace = root / WORKSPACE_FILE

        return cls(
            root_path=root,
            workspace_file=workspace,
            scope=scope or None,
            debug=debug,
        )

    def debug_print(self, msg: str) -> None:
        if self.debug:
            print(f"[affected-apps] {msg}")
