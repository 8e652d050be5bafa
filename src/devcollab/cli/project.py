"""Project inspection CLI commands.

Read-only views of the project store for operators; all changes go
through the API so the collaboration rules are applied.
"""

from __future__ import annotations

import asyncio
import json
from typing import Annotated, Any, Optional
from uuid import UUID

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from devcollab.database.models.project import Project, ProjectStatus
from devcollab.database.queries.project import get_project, list_owned_projects
from devcollab.services.projects import filter_projects

app = typer.Typer(help="Project inspection commands")
console = Console()

STATUS_COLORS = {
    "active": "green",
    "completed": "blue",
    "archived": "dim",
}


def project_to_dict(project: Project) -> dict[str, Any]:
    """Plain JSON-ready view of a project for --format json."""
    return {
        "id": str(project.id),
        "name": project.name,
        "description": project.description,
        "visibility": project.visibility.value,
        "ownerId": project.owner_id,
        "ownerEmail": project.owner_email,
        "collaborators": list(project.collaborators),
        "tags": list(project.tags),
        "githubRepo": project.github_repo,
        "githubRepoId": project.github_repo_id,
        "status": project.status.value,
        "createdAt": project.created_at.isoformat(),
        "updatedAt": project.updated_at.isoformat() if project.updated_at else None,
    }


@app.command("list")
def list_projects(
    owner_uid: Annotated[str, typer.Argument(help="uid of the project owner")],
    search: Annotated[
        Optional[str],
        typer.Option("--search", "-q", help="Match name or description (case-insensitive)"),
    ] = None,
    status: Annotated[
        Optional[str],
        typer.Option("--status", "-s", help="Filter by status (active, completed, archived)"),
    ] = None,
    format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format (table or json)"),
    ] = "table",
) -> None:
    """List the projects a user owns, newest first."""
    from devcollab.main import get_app_context

    ctx = get_app_context()

    status_filter = None
    if status is not None:
        try:
            status_filter = ProjectStatus(status)
        except ValueError:
            console.print(
                f"[red]Invalid status:[/red] {status}. Valid values: active, completed, archived"
            )
            raise typer.Exit(code=1)

    async def _list_projects() -> list[Project]:
        try:
            async with ctx.session_factory() as session:
                return await list_owned_projects(session, owner_uid)
        finally:
            await ctx.engine.dispose()

    try:
        projects = asyncio.run(_list_projects())
    except Exception as e:
        console.print(f"[red]Error listing projects:[/red] {e}")
        raise typer.Exit(code=1)

    projects = filter_projects(projects, search=search, status=status_filter)

    if format == "json":
        console.print(json.dumps([project_to_dict(p) for p in projects], indent=2))
        return

    if not projects:
        console.print("[yellow]No projects found[/yellow]")
        return

    table = Table(title=f"Projects owned by {owner_uid}")
    # full ids fold so names stay readable in an 80-column terminal
    table.add_column("ID", style="cyan", overflow="fold")
    table.add_column("Name", style="bold", min_width=12)
    table.add_column("Visibility", no_wrap=True)
    table.add_column("Status", style="magenta", no_wrap=True)
    table.add_column("Members", justify="right", no_wrap=True)
    table.add_column("Created", style="dim", no_wrap=True)

    for p in projects:
        color = STATUS_COLORS.get(p.status.value, "white")
        table.add_row(
            str(p.id),
            p.name,
            p.visibility.value,
            f"[{color}]{p.status.value}[/{color}]",
            str(len(p.collaborators)),
            p.created_at.strftime("%Y-%m-%d"),
        )

    console.print(table)


@app.command()
def show(
    project_id: Annotated[str, typer.Argument(help="Project UUID")],
) -> None:
    """Show a project's details."""
    from devcollab.main import get_app_context

    ctx = get_app_context()

    try:
        project_uuid = UUID(project_id)
    except ValueError:
        console.print(f"[red]Invalid project ID:[/red] {project_id}")
        raise typer.Exit(code=1)

    async def _get_project() -> Project | None:
        try:
            async with ctx.session_factory() as session:
                return await get_project(session, project_uuid)
        finally:
            await ctx.engine.dispose()

    try:
        project = asyncio.run(_get_project())
    except Exception as e:
        console.print(f"[red]Error fetching project:[/red] {e}")
        raise typer.Exit(code=1)

    if project is None:
        console.print(f"[red]Project not found:[/red] {project_id}")
        raise typer.Exit(code=1)

    readme_state = f"{len(project.readme)} characters" if project.readme else "not generated"
    panel = Panel(
        f"[bold]ID:[/bold] {project.id}\n"
        f"[bold]Name:[/bold] {project.name}\n"
        f"[bold]Description:[/bold] {project.description or '-'}\n"
        f"[bold]Visibility:[/bold] {project.visibility.value}\n"
        f"[bold]Status:[/bold] {project.status.value}\n"
        f"[bold]Owner:[/bold] {project.owner_email} ({project.owner_id})\n"
        f"[bold]Collaborators:[/bold] {', '.join(project.collaborators)}\n"
        f"[bold]Tags:[/bold] {', '.join(project.tags) or '-'}\n"
        f"[bold]Repository:[/bold] {project.github_repo or 'not linked'}\n"
        f"[bold]README:[/bold] {readme_state}\n"
        f"[bold]Created:[/bold] {project.created_at.strftime('%Y-%m-%d %H:%M:%S')}",
        title=project.name,
        border_style="cyan",
    )
    console.print(panel)
