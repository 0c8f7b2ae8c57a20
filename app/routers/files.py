from urllib.parse import quote

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse
from starlette.datastructures import UploadFile
import structlog

from app.config import Settings, get_settings
from app.dependencies import get_s3_service
from app.exceptions import ClientInputError
from app.schemas.files import (
    DeleteResponse,
    FileInfo,
    FileListResponse,
    RawFileListResponse,
    UploadResponse,
)
from app.services.keys import build_object_key
from app.services.s3_service import S3Service
from app.services.upload_policy import check_upload_allowed

logger = structlog.get_logger()
router = APIRouter(tags=["files"])


@router.post("/upload", response_model=UploadResponse)
async def upload_file(
    request: Request,
    settings: Settings = Depends(get_settings),
    s3_service: S3Service = Depends(get_s3_service),
):
    """
    Upload the multipart "file" part to the bucket.

    The form is read directly so that a missing part and a plain text
    "file" field are both rejected as "no file" rather than failing
    request validation.

    Args:
        request: Incoming multipart request
        settings: Application settings
        s3_service: Storage adapter

    Returns:
        The generated key, the file's MIME type and the bucket name
    """
    async with request.form() as form:
        file = form.get("file")
        if not isinstance(file, UploadFile):
            raise ClientInputError("Please upload a file")
        return await _store_upload(file, settings, s3_service)


async def _store_upload(
    file: UploadFile, settings: Settings, s3_service: S3Service
) -> UploadResponse:
    check_upload_allowed(file.filename, file.size, settings)

    key = build_object_key(file.filename)
    await file.seek(0)
    await s3_service.upload(
        key,
        file.file,
        file.content_type,
        size=file.size,
        track_progress=settings.upload_progress_enabled,
    )

    logger.info(
        "File uploaded",
        key=key,
        filename=file.filename,
        content_type=file.content_type,
    )

    return UploadResponse(
        fileName=key,
        fileType=file.content_type,
        bucketName=s3_service.bucket_name,
    )


@router.get("/list", response_model=RawFileListResponse)
async def list_files(s3_service: S3Service = Depends(get_s3_service)):
    """Return the bucket listing as reported by S3."""
    contents = await s3_service.list_objects()
    return RawFileListResponse(files=contents)


@router.get("/list1", response_model=FileListResponse, response_model_exclude_none=True)
async def list_files_with_urls(s3_service: S3Service = Depends(get_s3_service)):
    """Return the bucket listing with public URLs, sizes and timestamps."""
    stored = await s3_service.list_files()
    if not stored:
        return FileListResponse(message="No files found in the bucket.")

    return FileListResponse(
        message="Files retrieved successfully!",
        files=[
            FileInfo(
                fileName=obj.key,
                url=obj.url,
                size=obj.size,
                lastModified=obj.last_modified,
            )
            for obj in stored
        ],
    )


def content_disposition(filename: str) -> str:
    """
    Build an attachment Content-Disposition value.

    Header values are sent as latin-1, so names outside it get a
    percent-encoded fallback plus an RFC 5987 filename* parameter.
    """
    try:
        filename.encode("latin-1")
    except UnicodeEncodeError:
        encoded = quote(filename, safe="")
        return f"attachment; filename={encoded}; filename*=UTF-8''{encoded}"
    return f"attachment; filename={filename}"


@router.get("/download/{fileName:path}")
async def download_file(fileName: str, s3_service: S3Service = Depends(get_s3_service)):
    """Stream an object back to the client as an attachment."""
    headers = {"Content-Disposition": content_disposition(fileName)}

    stream = await s3_service.download(fileName)
    if stream.content_length is not None:
        headers["Content-Length"] = str(stream.content_length)

    return StreamingResponse(
        stream.iter_bytes(),
        media_type=stream.content_type,
        headers=headers,
    )


@router.delete("/delete/{fileName:path}", response_model=DeleteResponse)
async def delete_file(fileName: str, s3_service: S3Service = Depends(get_s3_service)):
    """
    Delete an object from the bucket.

    Deleting a key that does not exist is not treated specially; whatever
    S3 reports is passed through.
    """
    await s3_service.delete(fileName)
    return DeleteResponse(fileName=fileName)
