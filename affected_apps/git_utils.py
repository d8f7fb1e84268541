from __future__ import annotations

import subprocess
from pathlib import Path


class GitError(Exception):
    pass


def _run_git(args: list[str], cwd: str | Path) -> str:
    try:
        completed = subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError as e:
        raise GitError("git is not installed or not on PATH") from e
    if completed.returncode != 0:
        raise GitError(
            f"Git command failed: git {' '.join(args)}: {completed.stderr.strip()}"
        )
    return completed.stdout


def _porcelain_paths(line: str) -> list[str]:
    # format: XY path, or XY old -> new for renames
    entry = line[3:]
    if " -> " in entry:
        return [p.strip().strip('"') for p in entry.split(" -> ", 1)]
    return [entry.strip().strip('"')]


def _show_prefix(cwd: str | Path) -> str:
    # e.g. "frontend/" when cwd is a subdirectory of the work tree, "" at the top
    return _run_git(["rev-parse", "--show-prefix"], cwd).strip()


def git_touched_files(
    base_ref: str | None,
    head_ref: str | None,
    uncommitted: bool,
    cwd: str | Path,
) -> list[str]:
    """
    Return paths changed between base_ref and head_ref, relative to cwd.
    Without head_ref the diff is against the working tree. Deleted files
    are kept: they still touch the project that owned them.
    Changes outside cwd are left out when cwd is below the repo top level.
    Optionally include uncommitted and untracked changes.
    """
    base = base_ref or "HEAD"
    args = ["diff", "--name-only", "--relative", base]
    if head_ref:
        args.append(head_ref)
    args.append("--")

    touched: list[str] = []
    for line in _run_git(args, cwd).splitlines():
        if line.strip():
            touched.append(line.strip())

    if uncommitted:
        # porcelain paths are always relative to the repo top level
        prefix = _show_prefix(cwd)
        out = _run_git(["status", "--porcelain", "--untracked-files=all"], cwd)
        for line in out.splitlines():
            if len(line) <= 3:
                continue
            for path in _porcelain_paths(line):
                if path.startswith(prefix):
                    touched.append(path[len(prefix):])

    return list(dict.fromkeys(touched))
