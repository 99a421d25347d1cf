"""
Flask CLI commands for inspecting the strain catalog.

Usage:
    flask --app wsgi catalog-stats                 # Size, per-type counts, flavors
    flask --app wsgi search-strains berry          # Same search the page runs
    flask --app wsgi search-strains "" --limit 5   # First 5 records
"""

from __future__ import annotations

import click
from flask.cli import with_appcontext


@click.command("catalog-stats")
@with_appcontext
def catalog_stats_command() -> None:
    """Print a summary of the loaded strain catalog."""
    from strain_scanner.services import catalog

    stats = catalog.catalog_stats()
    if not stats["total"]:
        click.echo("Catalog is empty. Check STRAIN_DATA_PATH.")
        raise SystemExit(1)

    click.echo(f"Strains: {stats['total']}")
    for strain_type, count in stats["by_type"].items():
        click.echo(f"  {strain_type}: {count}")
    click.echo(f"Distinct flavors: {stats['distinct_flavors']}")


@click.command("search-strains")
@click.argument("query")
@click.option("--limit", type=int, default=None,
              help="Maximum number of matches (defaults to SEARCH_RESULT_LIMIT).")
@with_appcontext
def search_strains_command(query: str, limit: int | None) -> None:
    """Search strains by name, flavor or description."""
    from strain_scanner.services import catalog

    results = catalog.search_strains(query, limit=limit)
    if not results:
        click.echo(f"No strains match “{query}”.")
        return

    for strain in results:
        card = catalog.format_strain(strain)
        click.echo(f"{card['name']} [{card['type_label']}]")
        click.echo(f"    Flavors: {card['flavors_label']}")

    click.echo(f"\n{len(results)} match(es).")
