"""
Command-line interface for schema_scout.

Provides profile, relations, badges, quality and init-config commands for
inspecting a SQLite database.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Coroutine, Optional

import click
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from schema_scout import __version__
from schema_scout.config import ScoutConfig, dump_config, load_config
from schema_scout.errors import SchemaInferenceError

console = Console()


def setup_logging(verbose: bool = False) -> None:
    """Configure logging with Rich handler."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _run(coro: Coroutine[Any, Any, Any]) -> Any:
    """Run a coroutine, turning inference failures into a non-zero exit."""
    try:
        return asyncio.run(coro)
    except SchemaInferenceError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)


def _load(config: Optional[Path]) -> ScoutConfig:
    try:
        return load_config(config)
    except ValueError as e:
        console.print(f"[red]Invalid config: {escape(str(e))}[/red]")
        sys.exit(2)


async def _profile_store(database: Path, cfg: ScoutConfig):
    from schema_scout.metadata.introspector import SchemaIntrospector
    from schema_scout.store import SqliteStore

    async with SqliteStore(database) as store:
        return await SchemaIntrospector(store, cfg.profiling).profile_all()


async def _infer_store(database: Path, cfg: ScoutConfig):
    from schema_scout.discovery import RelationshipInferrer
    from schema_scout.metadata.introspector import SchemaIntrospector
    from schema_scout.store import SqliteStore

    async with SqliteStore(database) as store:
        profiles = await SchemaIntrospector(store, cfg.profiling).profile_all()
        relationships = await RelationshipInferrer(store, cfg.inference).infer(profiles)
        return profiles, relationships


async def _quality_store(database: Path, cfg: ScoutConfig, with_relationships: bool):
    from schema_scout.discovery import infer_relationships
    from schema_scout.store import SqliteStore
    from schema_scout.utils.quality import QualityReporter

    async with SqliteStore(database) as store:
        relationships = []
        if with_relationships:
            relationships = await infer_relationships(
                store, options=cfg.inference, settings=cfg.profiling
            )
        reporter = QualityReporter(store, relationships)
        await reporter.generate_report()
        return reporter


database_argument = click.argument(
    "database",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
config_option = click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML configuration file",
)


@click.group()
@click.version_option(version=__version__, prog_name="schema-scout")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
def cli(verbose: bool) -> None:
    """
    Schema Scout - Schema and Relationship Inference for SQLite

    Profile tables, pick primary keys and discover foreign-key relationships
    from naming conventions and value overlap.
    """
    setup_logging(verbose)


@cli.command()
@database_argument
@config_option
@click.option(
    "--table",
    "table_name",
    type=str,
    default=None,
    help="Show column details for one table",
)
def profile(database: Path, config: Optional[Path], table_name: Optional[str]) -> None:
    """
    Profile every table in a database.

    Examples:

        schema-scout profile shop.db

        schema-scout profile shop.db --table orders
    """
    cfg = _load(config)

    console.print("[bold blue]Schema Scout - Profiling[/bold blue]")
    console.print(f"Database: {database}")

    profiles = _run(_profile_store(database, cfg))

    tables_table = Table(title="Tables")
    tables_table.add_column("Table", style="cyan")
    tables_table.add_column("Rows", style="green", justify="right")
    tables_table.add_column("Columns", style="green", justify="right")
    tables_table.add_column("PK", style="yellow")
    tables_table.add_column("Unique", style="magenta")

    for p in profiles:
        tables_table.add_row(
            p.name,
            f"{p.row_count or 0:,}",
            str(len(p.columns)),
            p.primary_key or "-",
            ", ".join(sorted(p.unique_columns)) or "-",
        )
    console.print(tables_table)

    if table_name:
        match = next((p for p in profiles if p.name.lower() == table_name.lower()), None)
        if match is None:
            console.print(f"[red]Error: Table not found: {escape(table_name)}[/red]")
            sys.exit(1)

        col_table = Table(title=f"Columns of {match.name}")
        col_table.add_column("Column", style="cyan")
        col_table.add_column("Affinity", style="green")
        col_table.add_column("Not Null", justify="center")
        col_table.add_column("Unique", justify="center")
        col_table.add_column("Flags", style="yellow")
        col_table.add_column("Nulls", justify="right")

        for col in match.columns:
            flags = []
            if col.is_boolean:
                flags.append("boolean")
            if col.is_date_like:
                flags.append("date")
            col_table.add_row(
                col.name,
                col.affinity.value,
                "✓" if col.not_null else "",
                "✓" if col.unique else "",
                ", ".join(flags),
                f"{col.null_rate:.1%}",
            )
        console.print(col_table)


@cli.command()
@database_argument
@config_option
@click.option(
    "--min_coverage",
    type=float,
    default=None,
    help="Minimum fraction of child values found among parent keys",
)
@click.option(
    "--name_score",
    type=float,
    default=None,
    help="Minimum Dice score between column base and table name",
)
@click.option(
    "--allow_self_reference",
    is_flag=True,
    default=False,
    help="Allow a table to reference itself",
)
@click.option(
    "--output",
    type=click.Path(path_type=Path),
    default=None,
    help="Output path for discovered relationships YAML",
)
def relations(
    database: Path,
    config: Optional[Path],
    min_coverage: Optional[float],
    name_score: Optional[float],
    allow_self_reference: bool,
    output: Optional[Path],
) -> None:
    """
    Discover foreign-key relationships verified by coverage.

    Examples:

        schema-scout relations shop.db

        schema-scout relations shop.db --min_coverage 0.9 --output relations.yaml
    """
    from schema_scout.discovery import rank_relationships

    cfg = _load(config)
    try:
        if min_coverage is not None:
            cfg.inference.min_coverage = min_coverage
        if name_score is not None:
            cfg.inference.name_similarity_min_score = name_score
        if allow_self_reference:
            cfg.inference.allow_self_reference = True
        cfg.inference.__post_init__()
    except ValueError as e:
        console.print(f"[red]Invalid option: {escape(str(e))}[/red]")
        sys.exit(2)

    console.print("[bold blue]Schema Scout - Relationship Discovery[/bold blue]")
    console.print(f"Database: {database}")

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Profiling tables and verifying coverage...", total=None)
        profiles, relationships = _run(_infer_store(database, cfg))
        progress.update(task, completed=True)

    console.print(f"\n[green]Discovery complete![/green] {len(profiles)} tables")

    if relationships:
        rel_table = Table(title="Discovered Relationships")
        rel_table.add_column("Child", style="cyan")
        rel_table.add_column("Child Column", style="green")
        rel_table.add_column("Parent", style="yellow")
        rel_table.add_column("Parent Column", style="magenta")
        rel_table.add_column("Coverage", style="blue", justify="right")

        for rel in rank_relationships(relationships):
            rel_table.add_row(
                rel.from_table,
                rel.from_column,
                rel.to_table,
                rel.to_column,
                f"{rel.coverage:.0%} ({rel.matched}/{rel.total})",
            )
        console.print(rel_table)
    else:
        console.print("\n[yellow]No relationships discovered.[/yellow]")
        console.print("Try lowering --min_coverage or --name_score.")

    if output:
        output = Path(output)
        output.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "database": str(database),
            "options": cfg.inference.to_dict(),
            "relationships": [
                {**rel.to_dict(), "join_example": rel.join_example()} for rel in relationships
            ],
        }
        with open(output, "w") as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
        console.print(f"\n[green]Saved relationships to: {output}[/green]")


@cli.command()
@database_argument
@config_option
@click.option(
    "--min_score",
    type=float,
    default=0.8,
    help="Minimum Dice score between column base and any table name",
)
def badges(database: Path, config: Optional[Path], min_score: float) -> None:
    """
    List columns whose names alone suggest a foreign key (no data checks).
    """
    from schema_scout.discovery import build_name_based_badges

    cfg = _load(config)
    profiles = _run(_profile_store(database, cfg))
    flagged = build_name_based_badges(profiles, min_score=min_score)

    badge_table = Table(title="Name-Based Key Hints")
    badge_table.add_column("Table", style="cyan")
    badge_table.add_column("Columns", style="green")
    for table_name, columns in flagged.items():
        badge_table.add_row(table_name, ", ".join(sorted(columns)) or "-")
    console.print(badge_table)


@cli.command()
@database_argument
@config_option
@click.option(
    "--output_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory to write report/quality.json and report/quality.md",
)
@click.option(
    "--with_relationships/--no_relationships",
    default=True,
    help="Include coverage of inferred relationships",
)
def quality(
    database: Path,
    config: Optional[Path],
    output_dir: Optional[Path],
    with_relationships: bool,
) -> None:
    """
    Report null rates, duplicate rows and type distribution per table.
    """
    cfg = _load(config)
    reporter = _run(_quality_store(database, cfg, with_relationships))
    report = reporter.report

    q_table = Table(title="Table Quality")
    q_table.add_column("Table", style="cyan")
    q_table.add_column("Rows", style="green", justify="right")
    q_table.add_column("Columns", style="green", justify="right")
    q_table.add_column("Avg Null Rate", style="yellow", justify="right")
    q_table.add_column("Duplicate Rows", style="magenta", justify="right")

    for table_name, t in report["tables"].items():
        q_table.add_row(
            table_name,
            f"{t['row_count']:,}",
            str(t["column_count"]),
            f"{t['avg_null_rate']:.1%}",
            f"{t['duplicate_row_rate']:.1%}",
        )
    console.print(q_table)

    ri_score = report["summary"]["referential_integrity_score"]
    if ri_score >= 1.0:
        console.print(f"\n[green]Referential Integrity: {ri_score:.0%}[/green]")
    else:
        console.print(f"\n[yellow]Referential Integrity: {ri_score:.0%}[/yellow]")

    if output_dir:
        json_path, md_path = reporter.save(output_dir)
        console.print(f"\n[green]Quality report saved to: {json_path.parent}[/green]")


@cli.command("init-config")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
def init_config(path: Path) -> None:
    """Write a configuration file with default settings."""
    written = dump_config(ScoutConfig(), path)
    console.print(f"[green]Wrote default config to: {written}[/green]")


if __name__ == "__main__":
    cli()
