from fastapi import APIRouter, Depends

from uploads_api.adapters.storage import LocalStorage
from uploads_api.dependencies import get_upload_service
from uploads_api.uploads import UploadService

router = APIRouter()


@router.get("/health")
async def health_check(service: UploadService = Depends(get_upload_service)):
    """
    Health check endpoint for monitoring API status and component readiness.

    Returns status of the API and storage components along with the storage mode.
    """
    health_status = {
        "status": "ok",
        "storage_mode": service.mode,
        "components": {
            "api": "ready",
            "storage": "ready"
        },
        "ready": False
    }

    # Local mode needs the public directory; S3 is not probed per request
    storage = service.storage
    if isinstance(storage, LocalStorage) and not storage.public_dir.is_dir():
        health_status["components"]["storage"] = f"error: missing directory {storage.public_dir}"
        health_status["status"] = "degraded"

    health_status["ready"] = all(
        state == "ready" for state in health_status["components"].values()
    )

    return health_status
