# urbact/cli.py
"""
Batch export of the city raster layers to Google Drive.
"""

from typing import Optional

import typer
from loguru import logger

from urbact.analysis import UrbanActivityAnalysis
from urbact.exporter import BatchExportPipeline
from urbact.service import CityService
from urbact.settings import configure_logging, get_settings

app = typer.Typer(
    help="Export NDVI, built-up surface and night-lights rasters for a city",
    add_completion=False,
)


@app.command()
def export(
    city: Optional[str] = typer.Option(None, "--city", "-c", help="City code from the registry"),
    project: Optional[str] = typer.Option(None, "--project", "-p", help="Google Cloud project with Earth Engine enabled"),
    registry: Optional[str] = typer.Option(None, "--registry", help="Path to the city registry JSON"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Build and validate the exports without submitting them"),
):
    """Queue the three raster exports; returns as soon as they are submitted."""
    settings = get_settings()
    configure_logging(settings.log_level)

    project_id = project or settings.project_id
    if not project_id:
        logger.error("No Earth Engine project. Pass --project or set URBACT_PROJECT_ID.")
        raise typer.Exit(2)

    service = CityService(registry or settings.registry_path)
    city_conf = service.get_city(city or settings.city)

    analysis = UrbanActivityAnalysis(project_id, city_conf)
    analysis.initialize_ee()

    jobs = BatchExportPipeline(analysis).run(dry_run=dry_run)
    verb = "Validated" if dry_run else "Queued"
    for job in jobs:
        typer.echo(f"{verb}: {job.folder}/{job.filename}")
