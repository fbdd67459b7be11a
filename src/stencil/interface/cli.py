"""Stencil command line.

Commands:
- init: create .stencil/ with a default config and an empty manifest
- add-template: register a template module
- render: render all (or some) source units through a template
- delete / rename: follow source deletions and renames
- status: list a template's artifacts and their mapped sources
"""

import json
import os
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from stencil import __version__
from stencil.container import Project
from stencil.foundation.config import save_default_config
from stencil.foundation.errors import StencilError
from stencil.foundation.logging import configure_logging
from stencil.foundation.paths import relative_to_root
from stencil.generation import RenderReport, SourceFile, Template
from stencil.interface.error_handler import handle_error
from stencil.workspace import Workspace

console = Console()

workspace_option = click.option(
    "--workspace",
    "-w",
    type=click.Path(exists=True, file_okay=False),
    default=".",
    help="Project workspace root",
)


class StencilGroup(click.Group):
    """Group that reports StencilError as a formatted message instead of a traceback.

    Commands taking `--json` set `ctx.meta["json_output"]` so their errors
    come out as JSON too.
    """

    def invoke(self, ctx: click.Context):
        try:
            return super().invoke(ctx)
        except StencilError as e:
            handle_error(e, json_output=ctx.meta.get("json_output", False))


@click.group(cls=StencilGroup)
@click.version_option(version=__version__, prog_name="stencil")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool) -> None:
    """Keep generated files in sync with the sources they come from.

    \b
    Examples:
        stencil init
        stencil add-template templates/models.tpl.py
        stencil render templates/models.tpl.py
        stencil rename templates/models.tpl.py src/Foo.cs src/Bar.cs
        stencil status templates/models.tpl.py --json
    """
    configure_logging(debug=debug)


def cli_entrypoint() -> None:
    """Entrypoint used by the console script; never shows a traceback."""
    try:
        main(standalone_mode=False)
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except click.Abort:
        console.print("\n[dim]Aborted[/dim]")
        sys.exit(130)
    except Exception as e:
        handle_error(e)


# ─────────────────────────────────────────────────────────────────
# Project setup
# ─────────────────────────────────────────────────────────────────


@main.command("init")
@workspace_option
def init(workspace: str) -> None:
    """Create .stencil/ with a default config and an empty manifest."""
    root = Path(workspace)
    config_path = root / ".stencil" / "config.yaml"

    if config_path.exists():
        console.print(f"[dim]Config already exists: {config_path}[/dim]")
    else:
        save_default_config(config_path)
        console.print(f"[green]✓[/green] Wrote {config_path}")

    project = Project(root)
    project.save()
    console.print(f"[green]✓[/green] Initialized {project.manifest_path}")


@main.command("add-template")
@click.argument("template")
@workspace_option
def add_template(template: str, workspace: str) -> None:
    """Register TEMPLATE (a Python template module) in the project."""
    ws = Workspace(workspace)
    tpl = ws.register_template(template)

    console.print(f"[green]✓[/green] Registered {tpl.item.name}")
    console.print(f"  Extension: {tpl.settings.extension}")
    console.print(f"  Sources:   {tpl.settings.source_pattern}")
    if tpl.settings.included_scopes:
        console.print(f"  Scopes:    {', '.join(tpl.settings.included_scopes)}")


# ─────────────────────────────────────────────────────────────────
# Generation
# ─────────────────────────────────────────────────────────────────


@main.command("render")
@click.argument("template")
@click.argument("sources", nargs=-1)
@click.option("--no-save", is_flag=True, help="Don't write the project manifest")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@workspace_option
@click.pass_context
def render(
    ctx: click.Context,
    template: str,
    sources: tuple[str, ...],
    no_save: bool,
    json_output: bool,
    workspace: str,
) -> None:
    """Render source units through TEMPLATE.

    Without SOURCES, every source unit the template selects is rendered.

    \b
    Examples:
        stencil render templates/models.tpl.py
        stencil render templates/models.tpl.py src/Foo.cs --json
    """
    ctx.meta["json_output"] = json_output
    ws = Workspace(workspace)
    tpl = ws.template(template)
    persist = ws.config.generation.persist and not no_save

    paths = [str(ws.resolve(source)) for source in sources] if sources else None
    report = tpl.render_all(persist=persist, paths=paths)

    if json_output:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        _display_report(ws, report)

    if not report.ok:
        sys.exit(1)


def _display_report(ws: Workspace, report: RenderReport) -> None:
    for path in report.rendered:
        console.print(f"[green]✓[/green] {relative_to_root(ws.root, path)}")
    for path in report.skipped:
        console.print(f"[dim]- {relative_to_root(ws.root, path)} (not a source of this template)[/dim]")
    for path in report.failed:
        console.print(f"[red]✗[/red] {relative_to_root(ws.root, path)} (render failed)")
    for path, message in report.errors.items():
        console.print(f"[red]✗[/red] {relative_to_root(ws.root, path)}: {message}")

    summary = f"{len(report.rendered)} rendered"
    if report.failed or report.errors:
        summary += f", {len(report.failed) + len(report.errors)} failed"
    console.print(f"\n[bold]{summary}[/bold]")


@main.command("delete")
@click.argument("template")
@click.argument("source")
@workspace_option
def delete(template: str, source: str, workspace: str) -> None:
    """Remove the artifact TEMPLATE generated from SOURCE."""
    ws = Workspace(workspace)
    tpl = ws.template(template)

    if tpl.delete_artifact(str(ws.resolve(source)), persist=True):
        console.print(f"[green]✓[/green] Deleted artifact of {source}")
    else:
        console.print(f"[yellow]No artifact for {source}[/yellow]")


@main.command("rename")
@click.argument("template")
@click.argument("old")
@click.argument("new")
@workspace_option
def rename(template: str, old: str, new: str, workspace: str) -> None:
    """Follow a rename of a source unit from OLD to NEW."""
    ws = Workspace(workspace)
    tpl = ws.template(template)
    old_path = str(ws.resolve(old))
    new_path = str(ws.resolve(new))

    if tpl.rename_artifact(SourceFile(new_path), old_path, new_path, persist=True):
        item = tpl.lookup.find_by_source_path(new_path)
        name = item.name if item is not None else new
        console.print(f"[green]✓[/green] {old} -> {new} (artifact {name})")
    else:
        console.print(f"[yellow]No artifact for {old}[/yellow]")


# ─────────────────────────────────────────────────────────────────
# Inspection
# ─────────────────────────────────────────────────────────────────


def _artifact_rows(ws: Workspace, tpl: Template) -> list[dict]:
    """One row per readable artifact with its mapping state.

    States: ok, unmapped, dangling (mapped source is gone), missing (artifact
    file is gone).
    """
    rows = []
    for item, mapped in tpl.lookup.iter_readable():
        if not os.path.exists(item.path):
            state = "missing"
        elif mapped is None:
            state = "unmapped"
        elif not mapped.exists():
            state = "dangling"
        else:
            state = "ok"
        rows.append({
            "artifact": relative_to_root(ws.root, item.path),
            "source": relative_to_root(ws.root, mapped) if mapped is not None else None,
            "state": state,
        })
    return sorted(rows, key=lambda row: row["artifact"].casefold())


@main.command("status")
@click.argument("template")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@workspace_option
@click.pass_context
def status(ctx: click.Context, template: str, json_output: bool, workspace: str) -> None:
    """List TEMPLATE's artifacts and the sources they map to."""
    ctx.meta["json_output"] = json_output
    ws = Workspace(workspace)
    tpl = ws.template(template)
    rows = _artifact_rows(ws, tpl)

    if json_output:
        print(json.dumps({"template": tpl.item.name, "artifacts": rows}, indent=2))
        return

    if not rows:
        console.print(f"[dim]{tpl.item.name} has no artifacts yet.[/dim]")
        return

    styles = {"ok": "green", "unmapped": "yellow", "dangling": "red", "missing": "red"}
    table = Table(title=tpl.item.name, show_header=True, header_style="bold")
    table.add_column("Artifact")
    table.add_column("Source", style="dim")
    table.add_column("State")

    for row in rows:
        style = styles[row["state"]]
        table.add_row(row["artifact"], row["source"] or "-", f"[{style}]{row['state']}[/{style}]")

    console.print(table)
