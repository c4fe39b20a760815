from textwrap import dedent
import logging
import pydantic
from fastapi import FastAPI
from fastapi.routing import APIRoute
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from uploads_api.adapters.storage import LocalStorage
from uploads_api.config.settings import Settings, get_settings
from uploads_api.errors import (
    UploadError,
    handle_broad_exceptions,
    handle_pydantic_validation_errors,
    handle_upload_errors,
)
from uploads_api.routers.health import router as health_router
from uploads_api.routers.uploads import router as uploads_router
from uploads_api.uploads import UploadService
from uploads_api.utils import configure_logging

# Set up logging
logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    upload_service: UploadService | None = None,
) -> FastAPI:
    """Create a FastAPI application.

    The storage backend is chosen here, once, from `settings`; pass
    `upload_service` to run the app over a backend built elsewhere.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Uploads API",
        summary="Store user avatars and post attachments",
        version="v1",
        description=dedent(
            """\
        Uploads go to S3 when `AWS_IAM_USER_KEY`, `AWS_IAM_USER_SECRET` and
        `AWS_BUCKET_NAME` are all set, and to the local `public/uploads`
        directory otherwise.

        | Helpful Links | Notes |
        | --- | --- |
        | [FastAPI Documentation](https://fastapi.tiangolo.com/) | |
        | [Request Files](https://fastapi.tiangolo.com/tutorial/request-files/) | multipart uploads |
        """
        ),
        docs_url="/",  # its easier to find the docs when they live on the base url
        generate_unique_id_function=custom_generate_unique_id,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.settings = settings
    app.state.upload_service = upload_service or UploadService.from_settings(settings)
    logger.info("Storage mode: %s", app.state.upload_service.mode)

    storage = app.state.upload_service.storage
    if isinstance(storage, LocalStorage):
        # Serves the locations LocalStorage hands out
        storage.public_dir.mkdir(parents=True, exist_ok=True)
        app.mount("/public", StaticFiles(directory=storage.public_dir), name="public")

    app.include_router(uploads_router, prefix="/v1", tags=["uploads"])
    app.include_router(health_router, tags=["health"])

    app.add_exception_handler(
        exc_class_or_status_code=UploadError,
        handler=handle_upload_errors,
    )
    app.add_exception_handler(
        exc_class_or_status_code=pydantic.ValidationError,
        handler=handle_pydantic_validation_errors,
    )
    app.middleware("http")(handle_broad_exceptions)

    return app


def custom_generate_unique_id(route: APIRoute):
    """
    Generate prettier `operationId`s in the OpenAPI schema.

    These become the function names in generated client SDKs.
    """
    return f"{route.tags[0]}-{route.name}"


if __name__ == "__main__":
    import uvicorn

    app = create_app()
    uvicorn.run(app, host="0.0.0.0", port=8000)
