"""Command-line interface for cinecatalog."""

import sys
from pathlib import Path

import click

from cinecatalog import __version__
from cinecatalog.api.app import build_store
from cinecatalog.config import load_config
from cinecatalog.core.catalog import Catalog
from cinecatalog.core.importer import export_catalog, import_media, validate_json
from cinecatalog.core.ranker import Ranker
from cinecatalog.utils.logger import get_logger, setup_logging


def _open_catalog(config):
    """Load the catalog from the configured data directory."""
    catalog = Catalog(Ranker.from_config(config.recommendations))
    store = build_store(config)
    store.load(catalog)
    return catalog, store


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (defaults to built-in defaults)",
)
@click.pass_context
def cli(ctx, config):
    """cinecatalog - media catalog normalization and recommendations."""
    try:
        cfg = load_config(config)
        ctx.ensure_object(dict)
        ctx.obj["config"] = cfg

        setup_logging(cfg.logging)

    except Exception as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        sys.exit(1)


@cli.command("import")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--validate/--no-validate",
    default=False,
    help="Require id, title and type on every record",
)
@click.pass_context
def import_file(ctx, file, validate):
    """Import raw (possibly malformed) catalog data from FILE.

    Args:
        file: Path to a JSON or JSON-like text file
    """
    config = ctx.obj["config"]
    logger = get_logger(__name__)

    click.echo(f"Importing: {file}")

    catalog, store = _open_catalog(config)
    text = file.read_text(encoding="utf-8")

    result = import_media(
        catalog,
        text,
        validate=validate,
        default_type=config.catalog.default_type,
        default_year=config.catalog.default_year,
    )

    if result.success:
        store.save(catalog)
    logger.debug("Import finished", file=str(file), success=result.success)

    click.secho(f"✓ Imported {result.success} of {result.total} item(s)", fg="green")
    if result.failed:
        click.secho(f"⊘ Failed: {result.failed}", fg="yellow")
        for error in result.errors:
            click.echo(f"  - {error}")

    if result.total and not result.success:
        sys.exit(1)


@cli.command()
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the export to a file instead of stdout",
)
@click.pass_context
def export(ctx, output):
    """Export the deduplicated catalog as JSON."""
    config = ctx.obj["config"]

    catalog, _ = _open_catalog(config)
    data = export_catalog(catalog)

    if output is None:
        click.echo(data)
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(data, encoding="utf-8")
    click.secho(f"✓ Exported catalog to {output}", fg="green", err=True)


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def validate(file):
    """Strictly validate a JSON catalog FILE without importing it."""
    validation = validate_json(file.read_text(encoding="utf-8"))

    if validation.is_valid:
        click.secho(f"✓ Valid: {len(validation.items)} item(s)", fg="green")
        return

    click.secho(f"✗ Invalid: {validation.error}", fg="red", err=True)
    sys.exit(1)


@cli.command()
@click.argument("media_id")
@click.option("--limit", "-n", type=int, default=None, help="Maximum number of results")
@click.pass_context
def recommend(ctx, media_id, limit):
    """Show recommendations for MEDIA_ID."""
    config = ctx.obj["config"]

    catalog, _ = _open_catalog(config)
    if media_id not in catalog:
        click.secho(f"✗ Media not found: {media_id}", fg="red", err=True)
        sys.exit(1)

    results = catalog.recommendations(media_id)
    if limit is not None:
        results = results[:limit]

    if not results:
        click.secho("⊘ No recommendations", fg="yellow")
        return

    for idx, media in enumerate(results, 1):
        click.echo(f"{idx:>3}. {media}")


@cli.command()
@click.argument("media_id")
@click.pass_context
def show(ctx, media_id):
    """Show a single media item."""
    config = ctx.obj["config"]

    catalog, _ = _open_catalog(config)
    media = catalog.get(media_id)
    if media is None:
        click.secho(f"✗ Media not found: {media_id}", fg="red", err=True)
        sys.exit(1)

    click.echo(f"{media.title} ({media.year})")
    click.echo(f"  ID:       {media.id}")
    click.echo(f"  Type:     {media.type}")
    if media.category:
        click.echo(f"  Category: {media.category}")
    if media.rating:
        click.echo(f"  Rating:   {media.rating}")
    if media.episodes:
        click.echo(f"  Episodes: {len(media.episodes)}")
    server = media.default_server()
    if server:
        click.echo(f"  Watch:    {server.url}")


@cli.command()
@click.pass_context
def serve(ctx):
    """Start the HTTP API."""
    config = ctx.obj["config"]

    click.echo("Starting cinecatalog API...")
    click.echo(f"Listening on {config.api.host}:{config.api.port}")
    click.echo(f"Data directory: {config.catalog.data_dir}")
    click.echo("")
    click.echo("Endpoints:")
    click.echo(f"  - Media:        http://{config.api.host}:{config.api.port}/api/media")
    click.echo(f"  - Import:       http://{config.api.host}:{config.api.port}/api/media/import")
    click.echo(f"  - Health check: http://{config.api.host}:{config.api.port}/health")
    click.echo(f"  - API docs:     http://{config.api.host}:{config.api.port}/docs")
    click.echo("")
    click.echo("Press Ctrl+C to stop")
    click.echo("")

    from cinecatalog.daemon import start_daemon

    try:
        start_daemon(config)
    except KeyboardInterrupt:
        click.echo("\n\nServer stopped")
        sys.exit(0)


@cli.command()
def version():
    """Show version information."""
    click.echo(f"cinecatalog v{__version__}")


def main():
    """Entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
