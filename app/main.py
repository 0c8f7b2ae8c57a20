import logging
import sys

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
import structlog

from app.config import Settings, get_settings
from app.exceptions import ClientInputError, StorageOperationError
from app.routers import files
from app.schemas.files import ErrorResponse


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level.upper())

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


logger = structlog.get_logger()

FAILURE_MESSAGES = {
    "upload": "Failed to upload file",
    "list": "Failed to list files",
    "download": "Failed to download file",
    "delete": "Failed to delete file",
}


async def client_input_error_handler(request: Request, exc: ClientInputError):
    logger.warning("Rejected request", path=request.url.path, reason=exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(message=exc.message).model_dump(exclude_none=True),
    )


async def storage_error_handler(request: Request, exc: StorageOperationError):
    logger.error(
        "Storage operation failed",
        path=request.url.path,
        operation=exc.operation,
        error_type=type(exc).__name__,
        code=exc.code,
        key=exc.key,
        error=exc.detail,
    )
    message = FAILURE_MESSAGES.get(exc.operation, "Storage operation failed")
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(message=message, error=exc.to_dict()).model_dump(),
    )


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Upload Gateway API",
        description="Uploads files to an S3 bucket and lists, downloads and deletes them",
        version="1.0.0"
    )

    app.add_exception_handler(ClientInputError, client_input_error_handler)
    app.add_exception_handler(StorageOperationError, storage_error_handler)

    app.include_router(files.router)

    @app.get("/")
    async def root():
        """Health check endpoint."""
        return {"message": "Upload Gateway API is running"}

    @app.get("/health")
    async def health_check(settings: Settings = Depends(get_settings)):
        """Detailed health check endpoint."""
        return {
            "status": "healthy",
            "service": "upload-gateway",
            "version": "1.0.0",
            "bucket": settings.s3_bucket_name,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)
