# cli.py
import click
import logging
from uploads_api.config.settings import get_settings
from uploads_api.errors import StorageConfigurationError
from uploads_api.uploads import UploadService
from uploads_api.utils import configure_logging

# Configure logging
logger = logging.getLogger(__name__)


@click.group()
def cli():
    """CLI commands for the Uploads API"""
    pass


@cli.command()
def show_config():
    """Show current configuration"""
    settings = get_settings()

    print("Current Configuration:")
    for name, value in settings.get_display_dict().items():
        print(f"  {name}: {value}")

    if settings.has_partial_cloud_credentials:
        missing = ", ".join(settings.missing_cloud_credentials)
        print(f"Warning: incomplete cloud credentials, missing {missing}")


@cli.command()
def check_storage():
    """Build the storage backend the server would use"""
    settings = get_settings()
    configure_logging(settings.log_level)

    try:
        service = UploadService.from_settings(settings)
    except StorageConfigurationError as e:
        print(f"❌ Storage configuration invalid: {e}")
        raise SystemExit(1)

    print(f"✅ Storage backend ready: {service.mode}")


@cli.command()
@click.option("--host", default="0.0.0.0", show_default=True, help="Interface to bind")
@click.option("--port", default=8000, show_default=True, type=int, help="Port to listen on")
@click.option("--reload", is_flag=True, help="Reload on code changes (development)")
def serve(host, port, reload):
    """Run the API with uvicorn"""
    import uvicorn

    settings = get_settings()
    print(f"Starting Uploads API on {host}:{port} ({settings.storage_mode} storage)...")
    uvicorn.run(
        "uploads_api.main:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    cli()
