"""CLI interface for the catalog dataset generator."""

import logging
import sys
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from datagen import __version__
from datagen.config import SCALES, ScaleConfig, get_scale, list_scales
from datagen.db import QueryStats, check_connection, create_db_engine, ensure_database, get_query_stats
from datagen.errors import DatagenError
from datagen.metrics import GenerationResult
from datagen.pipeline import DatasetGenerator
from datagen.settings import get_settings
from datagen.verify import verify_dataset

console = Console()


def setup_logging(verbose: bool = False):
    """Set up logging configuration.

    Args:
        verbose: Enable verbose logging
    """
    level = logging.DEBUG if verbose else getattr(logging, get_settings().log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )

    # Statement timing logs at DEBUG; keep SQLAlchemy's own echo quiet
    if not verbose:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def scale_options(func):
    """Attach the scale selection options shared by generate and verify."""
    options = [
        click.option(
            "--scale",
            "scale_name",
            type=click.Choice(list(SCALES.keys())),
            default="reference",
            help="Scale preset to use",
        ),
        click.option("--categories", type=int, help="Category count (overrides preset)"),
        click.option("--tags", type=int, help="Tag count (overrides preset)"),
        click.option("--products", type=int, help="Product count (overrides preset)"),
        click.option(
            "--associations",
            type=int,
            help="Product/tag link attempts, 0 disables (overrides preset)",
        ),
        click.option(
            "--database-url",
            help="SQLAlchemy database URL (defaults to DATABASE_URL / PG_* settings)",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def resolve_scale(
    scale_name: str,
    categories: Optional[int],
    tags: Optional[int],
    products: Optional[int],
    associations: Optional[int],
) -> ScaleConfig:
    """Build the scale from a preset and CLI overrides, exiting on bad input."""
    try:
        return get_scale(scale_name).with_overrides(
            categories=categories,
            tags=tags,
            products=products,
            associations=associations,
        )
    except ValueError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)


def print_plan(scale: ScaleConfig, database_url: str, seed: Optional[int], batch_size: int):
    table = Table(title="Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Scale", scale.name)
    table.add_row("Description", scale.description)
    table.add_row("Categories", f"{scale.categories:,}")
    table.add_row("Tags", f"{scale.tags:,}")
    table.add_row("Products", f"{scale.products:,}")
    table.add_row(
        "Associations",
        f"{scale.associations:,} attempts" if scale.associations_enabled else "disabled",
    )
    table.add_row("Batch Size", f"{batch_size:,}")
    table.add_row("Database", database_url)
    if seed is not None:
        table.add_row("Random Seed", str(seed))

    console.print(table)
    console.print()


def print_result(result: GenerationResult):
    summary = result.get_summary()

    table = Table(title="Stages")
    table.add_column("Stage", style="cyan")
    table.add_column("Rows", justify="right", style="green")
    table.add_column("Batches", justify="right")
    table.add_column("Seconds", justify="right")
    table.add_column("Rows/s", justify="right")

    for stage in summary["stages"]:
        table.add_row(
            stage["stage"],
            f"{stage['rows']:,}",
            str(stage["batches"]),
            f"{stage['elapsed_seconds']:.2f}",
            f"{stage['rows_per_second']:,.0f}",
        )

    console.print(table)
    console.print(f"Total: {summary['total_rows']:,} rows in {summary['elapsed_seconds']:.2f}s")


def print_query_stats(stats: QueryStats):
    table = Table(title="Statements")
    table.add_column("Operation", style="cyan")
    table.add_column("Count", justify="right", style="green")

    for op_type, count in sorted(stats.by_operation.items()):
        table.add_row(op_type, f"{count:,}")

    console.print(table)
    console.print(
        f"{stats.total_queries:,} statements in {stats.total_time_ms:,.1f}ms, "
        f"{stats.slow_queries} slow"
    )


@click.group()
@click.version_option(version=__version__)
def cli():
    """Catalog Dataset Generator - Build benchmark data for query workloads."""
    pass


@cli.command()
@scale_options
@click.option("--seed", type=int, help="Random seed for reproducibility")
@click.option("--batch-size", type=int, help="Rows per insert batch")
@click.option("--create-db", is_flag=True, help="Create the PostgreSQL database if missing")
@click.option("--verbose", is_flag=True, help="Enable verbose logging")
@click.option("--dry-run", is_flag=True, help="Show configuration without running")
def generate(
    scale_name: str,
    categories: Optional[int],
    tags: Optional[int],
    products: Optional[int],
    associations: Optional[int],
    database_url: Optional[str],
    seed: Optional[int],
    batch_size: Optional[int],
    create_db: bool,
    verbose: bool,
    dry_run: bool,
):
    """Reset the catalog tables and generate a fresh dataset."""
    setup_logging(verbose)

    settings = get_settings()
    scale = resolve_scale(scale_name, categories, tags, products, associations)
    if batch_size is None:
        batch_size = settings.batch_size
    url = database_url or settings.dsn

    console.print("\n[bold cyan]Catalog Dataset Generator[/bold cyan]")
    console.print(f"Version: {__version__}\n")

    engine = None
    try:
        engine = create_db_engine(url)
        # Validates the batch size and dialect before anything is written
        generator = DatasetGenerator(engine, scale, seed=seed, batch_size=batch_size)
        print_plan(scale, engine.url.render_as_string(hide_password=True), seed, batch_size)

        if dry_run:
            console.print("[yellow]Dry run - not executing[/yellow]")
            return

        if create_db:
            ensure_database(url)

        result = generator.run()
        stats = get_query_stats(engine)
    except DatagenError as e:
        console.print(f"\n[red]Error: {escape(str(e))}[/red]")
        if verbose:
            console.print_exception()
        sys.exit(1)
    finally:
        if engine is not None:
            engine.dispose()

    print_result(result)
    if verbose:
        print_query_stats(stats)
    console.print("\n[green]✓ Data generation complete[/green]")


@cli.command()
@scale_options
@click.option("--verbose", is_flag=True, help="Enable verbose logging")
def verify(
    scale_name: str,
    categories: Optional[int],
    tags: Optional[int],
    products: Optional[int],
    associations: Optional[int],
    database_url: Optional[str],
    verbose: bool,
):
    """Check an existing dataset against a scale."""
    setup_logging(verbose)
    scale = resolve_scale(scale_name, categories, tags, products, associations)

    engine = create_db_engine(database_url)
    try:
        report = verify_dataset(engine, scale)
    except Exception as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)
    finally:
        engine.dispose()

    table = Table(title=f"Row Counts ({scale.name})")
    table.add_column("Table", style="cyan")
    table.add_column("Rows", justify="right", style="green")
    for name, count in report.counts.items():
        table.add_row(name, f"{count:,}")
    console.print(table)

    if report.ok:
        console.print("[green]✓ Dataset satisfies all invariants[/green]")
        return

    for violation in report.violations:
        console.print(f"[red]✗ {escape(violation)}[/red]")
    sys.exit(1)


@cli.command()
def scales():
    """List available scale presets."""
    console.print("\n[bold cyan]Available Scales[/bold cyan]\n")

    table = Table()
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    table.add_column("Categories", justify="right")
    table.add_column("Tags", justify="right")
    table.add_column("Products", justify="right")
    table.add_column("Associations", justify="right")

    for scale in list_scales():
        table.add_row(
            scale.name,
            scale.description,
            f"{scale.categories:,}",
            f"{scale.tags:,}",
            f"{scale.products:,}",
            f"{scale.associations:,}",
        )

    console.print(table)


@cli.command()
@click.option("--database-url", help="SQLAlchemy database URL")
def health(database_url: Optional[str]):
    """Check that the database is reachable."""
    setup_logging()

    engine = create_db_engine(database_url)
    try:
        check_connection(engine)
        console.print(f"[green]✓ Database is reachable at {engine.url.render_as_string(hide_password=True)}[/green]")
        success = True
    except Exception as e:
        console.print(f"[red]✗ Database check failed: {escape(str(e))}[/red]")
        success = False
    finally:
        engine.dispose()

    sys.exit(0 if success else 1)


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
