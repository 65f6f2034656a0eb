"""CLI interface for the family tree engine."""

import asyncio
import json
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .client import ClientConfig, FamilyTreeAPIError, FamilyTreeClient, TreeStore
from .fs import atomic_write_text
from .interaction import InteractionError, TreeController
from .logging import get_logger
from .models import Gender, ParentType, PersonInput, UnionStatus, UnionType
from .presentation import render_mermaid

app = typer.Typer(
    name="family-tree",
    help="Family tree layout and editing",
    add_completion=False,
)
console = Console()
logger = get_logger("family_tree.cli")


def _open_store() -> TreeStore:
    """Store client configured from the environment."""
    return FamilyTreeClient(ClientConfig.from_env())


def _run(coro):
    """Run a coroutine, turning store and interaction errors into exit code 1."""
    try:
        return asyncio.run(coro)
    except (FamilyTreeAPIError, InteractionError, ValueError) as e:
        logger.debug("cli.command_failed", error=str(e), error_type=type(e).__name__)
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


async def _loaded(store: TreeStore) -> TreeController:
    controller = TreeController(store)
    if not await controller.load():
        raise FamilyTreeAPIError(controller.error or "Failed to load family tree")
    return controller


def _person_input(**values) -> PersonInput:
    return PersonInput(**{k: v for k, v in values.items() if v is not None})


@app.command()
def show():
    """Lay out the tree and list every person with its position."""

    async def run():
        async with _open_store() as store:
            return await _loaded(store)

    controller = _run(run())
    if controller.graph.is_empty:
        console.print("[yellow]The family tree is empty.[/yellow]")
        return

    table = Table(title=f"Family Tree ({len(controller.graph.nodes)} people)")
    table.add_column("ID", style="dim")
    table.add_column("Name")
    table.add_column("Life")
    table.add_column("Rank", justify="right")
    table.add_column("X", justify="right")
    table.add_column("Y", justify="right")
    table.add_column("Pinned")

    for node in controller.view.nodes:
        table.add_row(
            node.id,
            node.label,
            node.lifespan,
            str(controller.layout.ranks.get(node.id, 0)),
            f"{node.position.x:.0f}",
            f"{node.position.y:.0f}",
            "yes" if node.pinned else "",
        )
    console.print(table)

    if controller.layout.broken_edges:
        console.print(f"[yellow]Ignored {len(controller.layout.broken_edges)} cyclic parent link(s)[/yellow]")


@app.command()
def relatives(person_id: str = typer.Argument(..., help="Person ID")):
    """Show parents, children and spouses of a person."""

    async def run():
        async with _open_store() as store:
            return await _loaded(store)

    controller = _run(run())
    person = controller.graph.person(person_id)
    if person is None:
        console.print(f"[red]Error: Unknown person: {person_id}[/red]")
        raise typer.Exit(1)

    rels = controller.relationships(person_id)
    lines = []
    for link in rels.parents:
        lines.append(f"Parent: {link.person.display_name} ({link.parent_type.value})")
    for link in rels.children:
        lines.append(f"Child: {link.person.display_name} ({link.parent_type.value})")
    for link in rels.spouses:
        status = link.union.status.value
        year = f", {link.union.start_year}" if link.union.start_year else ""
        lines.append(f"Spouse: {link.person.display_name} ({status}{year})")

    body = "\n".join(lines) if lines else "No recorded relatives."
    console.print(Panel(body, title=person.display_name))


@app.command()
def export(
    output: Path = typer.Argument(..., help="Output file (.json, .mmd or .md)"),
):
    """Export the laid-out diagram as JSON or a mermaid flowchart."""

    async def run():
        async with _open_store() as store:
            return await _loaded(store)

    controller = _run(run())
    suffix = output.suffix.lower()
    if suffix == ".json":
        text = json.dumps(controller.view.to_dict(), indent=2)
    elif suffix in (".mmd", ".md"):
        text = render_mermaid(controller.view)
        if suffix == ".md":
            text = f"```mermaid\n{text}```\n"
    else:
        console.print(f"[red]Error: Unsupported export format: {suffix or output.name}[/red]")
        raise typer.Exit(1)

    atomic_write_text(output, text)
    console.print(f"[green]Exported {len(controller.view.nodes)} people to {output}[/green]")


@app.command("add-person")
def add_person(
    first_name: str = typer.Option(None, "--first", "-f", help="First name"),
    last_name: str = typer.Option(None, "--last", "-l", help="Last name"),
    maiden_name: str = typer.Option(None, "--maiden", help="Maiden name"),
    gender: Gender = typer.Option(None, "--gender", "-g", help="Gender"),
    birth_date: str = typer.Option(None, "--birth", help="Birth date (YYYY-MM-DD)"),
    death_date: str = typer.Option(None, "--death", help="Death date (YYYY-MM-DD)"),
    occupation: str = typer.Option(None, "--occupation", help="Occupation"),
):
    """Create a person."""
    values = _person_input(
        first_name=first_name,
        last_name=last_name,
        maiden_name=maiden_name,
        gender=gender,
        birth_date=birth_date,
        death_date=death_date,
        occupation=occupation,
    )

    async def run():
        async with _open_store() as store:
            controller = await _loaded(store)
            controller.open_create_person()
            return await controller.submit_person(values)

    person = _run(run())
    console.print(f"[green]Created {person.display_name} ({person.id})[/green]")


@app.command("edit-person")
def edit_person(
    person_id: str = typer.Argument(..., help="Person ID"),
    first_name: str = typer.Option(None, "--first", "-f", help="First name"),
    last_name: str = typer.Option(None, "--last", "-l", help="Last name"),
    maiden_name: str = typer.Option(None, "--maiden", help="Maiden name"),
    gender: Gender = typer.Option(None, "--gender", "-g", help="Gender"),
    birth_date: str = typer.Option(None, "--birth", help="Birth date (YYYY-MM-DD)"),
    death_date: str = typer.Option(None, "--death", help="Death date (YYYY-MM-DD)"),
    occupation: str = typer.Option(None, "--occupation", help="Occupation"),
):
    """Update a person. Options left out keep their current value."""
    changes = {
        k: v
        for k, v in dict(
            first_name=first_name,
            last_name=last_name,
            maiden_name=maiden_name,
            gender=gender,
            birth_date=birth_date,
            death_date=death_date,
            occupation=occupation,
        ).items()
        if v is not None
    }

    async def run():
        async with _open_store() as store:
            controller = await _loaded(store)
            modal = controller.open_edit_person(person_id)
            values = modal.form.values.model_copy(update=changes)
            return await controller.submit_person(values)

    person = _run(run())
    console.print(f"[green]Updated {person.display_name} ({person.id})[/green]")


@app.command("add-union")
def add_union(
    person1_id: str = typer.Argument(..., help="First partner ID"),
    person2_id: str = typer.Argument(..., help="Second partner ID"),
    union_type: UnionType = typer.Option(None, "--type", "-t", help="Union type"),
    status: UnionStatus = typer.Option(UnionStatus.ONGOING, "--status", "-s", help="Union status"),
    start_date: str = typer.Option(None, "--start", help="Start date (YYYY-MM-DD)"),
    end_date: str = typer.Option(None, "--end", help="End date (YYYY-MM-DD)"),
    place: str = typer.Option(None, "--place", help="Place"),
):
    """Record a union between two people."""

    async def run():
        async with _open_store() as store:
            controller = await _loaded(store)
            modal = controller.open_create_union(person1_id, person2_id)
            form = modal.form
            form.union_type = union_type
            form.status = status
            form.start_date = start_date
            form.end_date = end_date
            form.place = place
            return await controller.submit_union(form)

    _run(run())
    console.print(f"[green]Linked {person1_id} and {person2_id}[/green]")


@app.command("add-parent")
def add_parent(
    parent_id: str = typer.Argument(..., help="Parent ID"),
    child_id: str = typer.Argument(..., help="Child ID"),
    parent_type: ParentType = typer.Option(ParentType.BIOLOGICAL, "--type", "-t", help="Parent type"),
):
    """Record a parent -> child link."""

    async def run():
        async with _open_store() as store:
            controller = await _loaded(store)
            modal = controller.open_create_parent_of(parent_id, child_id)
            modal.form.parent_type = parent_type
            return await controller.submit_parent_of(modal.form)

    _run(run())
    console.print(f"[green]{parent_id} is now {parent_type.value} parent of {child_id}[/green]")


@app.command()
def move(
    person_id: str = typer.Argument(..., help="Person ID"),
    x: float = typer.Argument(..., help="X (top-left corner)"),
    y: float = typer.Argument(..., help="Y (top-left corner)"),
):
    """Pin a person at a manual position."""

    async def run():
        async with _open_store() as store:
            await store.set_person_position(person_id, x, y)

    _run(run())
    console.print(f"[green]Pinned {person_id} at ({x:g}, {y:g})[/green]")


@app.command()
def unpin(person_id: str = typer.Argument(..., help="Person ID")):
    """Return a person to automatic layout."""

    async def run():
        async with _open_store() as store:
            controller = await _loaded(store)
            await controller.reset_position(person_id)
            return controller

    controller = _run(run())
    node = controller.view.node(person_id)
    where = f" at ({node.position.x:g}, {node.position.y:g})" if node else ""
    console.print(f"[green]{person_id} returned to automatic layout{where}[/green]")


@app.command()
def delete(
    person_id: str = typer.Argument(..., help="Person ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Delete a person."""

    async def run():
        async with _open_store() as store:
            controller = await _loaded(store)
            controller.select_node(person_id)
            modal = controller.request_delete()
            name = modal.target.display_name
            if not yes and not typer.confirm(f"Delete {name}?"):
                controller.cancel_modal()
                return name, False, None
            deleted = await controller.confirm_delete()
            return name, deleted, controller.inline_error

    name, deleted, error = _run(run())
    if not deleted and not error:
        console.print("Aborted.")
        return
    if error:
        console.print(f"[red]Error: {error}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Deleted {name}[/green]")


if __name__ == "__main__":
    app()
