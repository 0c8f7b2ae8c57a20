from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class UploadResponse(BaseModel):
    message: str = "File uploaded successfully!"
    fileName: str
    fileType: Optional[str] = None
    bucketName: str


class FileInfo(BaseModel):
    fileName: str
    url: str
    size: int
    lastModified: Optional[datetime] = None


class RawFileListResponse(BaseModel):
    message: str = "Files retrieved successfully"
    files: List[Dict[str, Any]]


class FileListResponse(BaseModel):
    message: str
    files: Optional[List[FileInfo]] = None


class DeleteResponse(BaseModel):
    message: str = "File deleted successfully"
    fileName: str


class ErrorResponse(BaseModel):
    message: str
    error: Optional[Dict[str, Any]] = None
