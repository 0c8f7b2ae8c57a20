from typing import Optional

from fastapi import Depends

from app.config import Settings, get_settings
from app.services.s3_service import S3Service

_s3_service: Optional[S3Service] = None


def get_s3_service(settings: Settings = Depends(get_settings)) -> S3Service:
    """Return the process-wide S3 service, building it on first use."""
    global _s3_service
    if _s3_service is None or _s3_service.settings is not settings:
        _s3_service = S3Service(settings)
    return _s3_service


def reset_s3_service() -> None:
    global _s3_service
    _s3_service = None
