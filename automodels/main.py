"""automodels - Main entry point."""

import json
import logging
from contextlib import contextmanager
from typing import Iterator, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .config import ModelConfig, settings
from .database import SchemaManager, connect
from .errors import AutoModelsError
from .relations import RelationshipInference

app = typer.Typer(
    name="automodels",
    help="Inspect database schemas and the model relationships inferred from them",
    add_completion=False,
)

console = Console()


@contextmanager
def open_manager(url: Optional[str]) -> Iterator[SchemaManager]:
    """Connect and boot a SchemaManager, exiting with status 1 on failure.

    The connection is closed when the block exits.
    """
    url = url or settings.database_url
    if not url:
        console.print("[red]No database URL. Pass --url or set AUTOMODELS_DATABASE_URL[/red]")
        raise typer.Exit(1)

    try:
        connection = connect(url, name=settings.connection_name)
    except ImportError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)
    except AutoModelsError as e:
        console.print(f"[red]{e.code}: {escape(e.message)}[/red]")
        raise typer.Exit(1)

    with connection:
        try:
            manager = SchemaManager(connection)
        except AutoModelsError as e:
            console.print(f"[red]{e.code}: {escape(e.message)}[/red]")
            raise typer.Exit(1)
        yield manager


@app.command()
def config():
    """Show current configuration."""
    console.print("[bold]Current Configuration[/bold]")
    console.print(f"  Database URL: {'Configured' if settings.database_url else 'Not set'}")
    console.print(f"  Connection name: {settings.connection_name}")
    console.print(f"  Models config: {settings.models_config_path or 'Not set'}")
    console.print(f"  Log level: {settings.log_level}")


@app.command()
def schemas(
    url: Optional[str] = typer.Option(None, "--url", "-u", help="Database URL (or AUTOMODELS_DATABASE_URL env)"),
):
    """List the schemas discovered on the connection."""
    with open_manager(url) as manager:
        for schema in manager:
            console.print(f"  Schema: [cyan]{schema.name}[/cyan] ({len(schema)} tables)")


@app.command()
def inspect(
    schema: str = typer.Argument(..., help="Schema (database) name"),
    table: Optional[str] = typer.Argument(None, help="Single table to show (default: all)"),
    url: Optional[str] = typer.Option(None, "--url", "-u", help="Database URL (or AUTOMODELS_DATABASE_URL env)"),
    as_json: bool = typer.Option(False, "--json", help="Print Blueprints as JSON"),
):
    """
    Show tables, columns and keys of a schema.

    Examples:
        automodels inspect shop --url sqlite:///shop.db
        automodels inspect shop users --json
    """
    with open_manager(url) as manager:
        try:
            blueprints = [manager.blueprint(schema, table)] if table else list(manager.make(schema))
        except AutoModelsError as e:
            console.print(f"[red]{e.code}: {escape(e.message)}[/red]")
            raise typer.Exit(1)

    if as_json:
        print(json.dumps([blueprint.to_dict() for blueprint in blueprints], indent=2, default=str))
        return

    for blueprint in blueprints:
        columns = Table(title=f"{blueprint.qualified_table()}{' (view)' if blueprint.is_view() else ''}")
        columns.add_column("Column", style="cyan")
        columns.add_column("Type", style="green")
        columns.add_column("Nullable")
        columns.add_column("Default")
        columns.add_column("Extra", style="magenta")

        for column in blueprint.columns().values():
            extra = []
            if column.autoincrement:
                extra.append("autoincrement")
            if column.unsigned:
                extra.append("unsigned")
            if column.enum:
                extra.append("enum(%s)" % ", ".join(column.enum))
            columns.add_row(
                column.name,
                column.type.value + (f"({column.size})" if column.size else ""),
                "yes" if column.nullable else "no",
                "" if column.default is None else str(column.default),
                " ".join(extra),
            )
        console.print(columns)

        primary_key = blueprint.primary_key()
        console.print(f"  Primary key: {', '.join(primary_key.columns) or '[yellow]none[/yellow]'}")
        for index in blueprint.indexes():
            label = escape(f"[{index.index}]")
            console.print(f"  {index.name.capitalize()} {label}: {', '.join(index.columns)}")
        for relation in blueprint.relations():
            console.print(
                f"  Foreign key ({', '.join(relation.columns)}) -> "
                f"{relation.on.schema}.{relation.on.table} ({', '.join(relation.references)})"
            )


@app.command()
def relations(
    schema: str = typer.Argument(..., help="Schema (database) name"),
    table: Optional[str] = typer.Argument(None, help="Single table to show (default: all)"),
    url: Optional[str] = typer.Option(None, "--url", "-u", help="Database URL (or AUTOMODELS_DATABASE_URL env)"),
):
    """Show the relationships inferred for each table."""
    with open_manager(url) as manager:
        try:
            inference = RelationshipInference(manager, ModelConfig.from_settings(settings))
            if table:
                mapped = {table: inference.relations(manager.blueprint(schema, table))}
            else:
                mapped = inference.map(schema)
        except AutoModelsError as e:
            console.print(f"[red]{e.code}: {escape(e.message)}[/red]")
            raise typer.Exit(1)

    for table_name, table_relations in mapped.items():
        if not table_relations:
            continue
        console.print(Panel(
            "\n\n".join(
                f"[yellow]{relation.kind.value}[/yellow] [cyan]{name}[/cyan]: {escape(relation.hint())}\n{escape(relation.body())}"
                for name, relation in table_relations.items()
            ),
            title=f"{schema}.{table_name}",
        ))

    total = sum(len(table_relations) for table_relations in mapped.values())
    console.print(f"[bold]Total: {total} relationships across {len(mapped)} table(s)[/bold]")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """
    automodels - database schema introspection and relationship inference.

    Examples:

        automodels schemas --url sqlite:///shop.db

        automodels inspect shop users

        automodels relations shop
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


if __name__ == "__main__":
    app()
