import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Any, BinaryIO, Dict, Iterator, List, Optional

import boto3
from boto3.s3.transfer import TransferConfig
import structlog

from app.config import Settings
from app.exceptions import translate_storage_error
from app.services.progress import UploadProgress

logger = structlog.get_logger()

DOWNLOAD_CHUNK_SIZE = 64 * 1024


@dataclass
class StoredObject:
    key: str
    size: int
    last_modified: Optional[datetime]
    url: str


@dataclass
class StoredObjectStream:
    key: str
    body: Any
    content_type: str
    content_length: Optional[int]

    def iter_bytes(self, chunk_size: int = DOWNLOAD_CHUNK_SIZE) -> Iterator[bytes]:
        """Yield the object body in chunks and close it afterwards."""
        try:
            for chunk in self.body.iter_chunks(chunk_size):
                if chunk:
                    yield chunk
        finally:
            self.body.close()


class S3Service:
    def __init__(self, settings: Settings, client: Any = None):
        self.settings = settings
        self.bucket_name = settings.s3_bucket_name
        self.region = settings.aws_region
        self.s3_client = client or boto3.client(
            's3',
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            region_name=settings.aws_region,
            endpoint_url=settings.s3_endpoint_url,
        )
        self.transfer_config = TransferConfig(
            multipart_threshold=settings.multipart_threshold,
            multipart_chunksize=settings.multipart_chunk_size,
            max_concurrency=settings.multipart_max_concurrency,
        )

    def object_url(self, key: str) -> str:
        return f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com/{key}"

    async def upload(
        self,
        key: str,
        fileobj: BinaryIO,
        content_type: Optional[str],
        size: Optional[int] = None,
        track_progress: bool = True,
    ) -> None:
        """
        Upload a file object to the bucket.

        boto3 switches to a multipart upload above the configured threshold
        and aborts the multipart upload if any part fails, so a failed
        upload leaves no partial object behind.

        Args:
            key: Destination key
            fileobj: Readable binary file object, read from its current position
            content_type: MIME type stored with the object
            size: Total size in bytes, used for progress percentages
            track_progress: Log progress events while transferring

        Raises:
            StorageOperationError: If the upload fails
        """
        extra_args = {"ContentType": content_type} if content_type else None
        callback = UploadProgress(key, size) if track_progress else None

        def _upload() -> None:
            self.s3_client.upload_fileobj(
                fileobj,
                self.bucket_name,
                key,
                ExtraArgs=extra_args,
                Callback=callback,
                Config=self.transfer_config,
            )

        try:
            await asyncio.to_thread(_upload)
        except Exception as e:
            raise translate_storage_error(e, "upload", key=key) from e

        logger.info(
            "Uploaded file to S3",
            bucket=self.bucket_name,
            key=key,
            content_type=content_type,
            size=size,
        )

    async def list_objects(self) -> List[Dict[str, Any]]:
        """
        Return the raw object entries of the bucket.

        Only the first page of results is fetched.
        """
        try:
            response = await asyncio.to_thread(
                self.s3_client.list_objects_v2, Bucket=self.bucket_name
            )
        except Exception as e:
            raise translate_storage_error(e, "list") from e

        return response.get("Contents") or []

    async def list_files(self) -> List[StoredObject]:
        contents = await self.list_objects()
        return [
            StoredObject(
                key=item["Key"],
                size=item.get("Size", 0),
                last_modified=item.get("LastModified"),
                url=self.object_url(item["Key"]),
            )
            for item in contents
        ]

    async def download(self, key: str) -> StoredObjectStream:
        """
        Open an object for streaming.

        Raises:
            StorageOperationError: If the object cannot be fetched
        """
        try:
            response = await asyncio.to_thread(
                self.s3_client.get_object, Bucket=self.bucket_name, Key=key
            )
        except Exception as e:
            raise translate_storage_error(e, "download", key=key) from e

        return StoredObjectStream(
            key=key,
            body=response["Body"],
            content_type=response.get("ContentType") or "application/octet-stream",
            content_length=response.get("ContentLength"),
        )

    async def delete(self, key: str) -> None:
        try:
            await asyncio.to_thread(
                self.s3_client.delete_object, Bucket=self.bucket_name, Key=key
            )
        except Exception as e:
            raise translate_storage_error(e, "delete", key=key) from e

        logger.info("Deleted file from S3", bucket=self.bucket_name, key=key)
