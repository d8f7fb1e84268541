"""Click CLI with apps and deps subcommands."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from affected_apps import __version__
from affected_apps.affected import select_affected_apps
from affected_apps.config import AffectedConfig
from affected_apps.git_utils import GitError, git_touched_files
from affected_apps.graph import (
    build_dependency_graph,
    normalize_files,
    normalize_projects,
    transitive_closure,
)
from affected_apps.report import DependencyReport, ReportFileError, save_report
from affected_apps.workspace import Workspace, WorkspaceError, load_workspace, read_workspace_file


def _load(config: AffectedConfig) -> tuple[Workspace, str]:
    try:
        workspace = load_workspace(config.root_path, config.workspace_file)
    except WorkspaceError as e:
        raise click.ClickException(str(e)) from e
    scope = config.scope or workspace.npm_scope
    config.debug_print(f"Scope @{scope}, {len(workspace.projects)} project(s)")
    return workspace, scope


def _build_graph(config: AffectedConfig, scope: str, workspace: Workspace):
    read_file = read_workspace_file(config.root_path)
    try:
        return build_dependency_graph(scope, workspace.projects, read_file)
    except (OSError, UnicodeDecodeError) as e:
        raise click.ClickException(f"Failed to read source file: {e}") from e


@click.group()
@click.version_option(version=__version__)
@click.option("--root", type=click.Path(exists=True, file_okay=False, path_type=Path), default=".",
              help="Workspace root directory.")
@click.option("--workspace", "workspace_file", type=click.Path(path_type=Path), default=None,
              help="Workspace manifest (default: workspace.json under --root).")
@click.option("--scope", default=None, help="npm scope; overrides the manifest's npmScope.")
@click.option("--debug", is_flag=True, default=False, help="Print debug information.")
@click.pass_context
def cli(ctx: click.Context, root: Path, workspace_file: Path | None, scope: str | None, debug: bool):
    """affected-apps: find the apps impacted by a set of changed files."""
    config = AffectedConfig.from_options(
        root_path=root, workspace_file=workspace_file, scope=scope, debug=debug,
    )
    if debug:
        logging.basicConfig(format="[affected-apps] %(levelname)s %(name)s: %(message)s")
        logging.getLogger("affected_apps").setLevel(logging.DEBUG)
    ctx.obj = config


@cli.command()
@click.option("--base", "base_ref", default=None, help="Base git reference (default: HEAD).")
@click.option("--head", "head_ref", default=None, help="Head git reference (default: working tree).")
@click.option("--uncommitted", is_flag=True, default=False,
              help="Include uncommitted and untracked changes.")
@click.option("--files", default=None, help="Comma-separated touched files; skips git.")
@click.pass_obj
def apps(config: AffectedConfig, base_ref: str | None, head_ref: str | None,
         uncommitted: bool, files: str | None):
    """Print the apps affected by the touched files, one per line."""
    if files is not None:
        touched = [f.strip() for f in files.split(",") if f.strip()]
    else:
        try:
            touched = git_touched_files(
                base_ref, head_ref, uncommitted, config.root_path,
            )
        except GitError as e:
            raise click.ClickException(str(e)) from e
    config.debug_print(f"Touched files: {len(touched)}")

    workspace, scope = _load(config)
    workspace.projects = normalize_projects(workspace.projects)
    touched = list(dict.fromkeys(normalize_files(touched)))
    if not touched:
        config.debug_print("No touched files")
        return

    graph = _build_graph(config, scope, workspace)
    affected = select_affected_apps(transitive_closure(graph), workspace.projects, touched)
    config.debug_print(f"Affected apps: {len(affected)}")
    for name in affected:
        click.echo(name)


@cli.command()
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Also write a msgpack dependency report to this file.")
@click.pass_obj
def deps(config: AffectedConfig, output: Path | None):
    """Print every project's transitive dependencies."""
    workspace, scope = _load(config)
    workspace.projects = normalize_projects(workspace.projects)
    graph = _build_graph(config, scope, workspace)
    closure = transitive_closure(graph)

    for project in workspace.projects:
        others = sorted(closure[project.name] - {project.name})
        kind = "app" if project.is_app else "lib"
        click.echo(f"{project.name} ({kind}): {', '.join(others) if others else '-'}")

    if output is not None:
        if not output.is_absolute():
            output = config.root_path / output
        try:
            save_report(output, DependencyReport(npm_scope=scope, graph=graph, closure=closure))
        except ReportFileError as e:
            raise click.ClickException(str(e)) from e
        config.debug_print(f"Saved report: {output}")


def main():
    cli()


if __name__ == "__main__":
    main()
