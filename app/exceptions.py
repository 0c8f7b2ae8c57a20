from typing import Any, Dict, Optional

from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    NoCredentialsError,
    PartialCredentialsError,
)


class GatewayError(Exception):
    """Base class for errors raised by the upload gateway."""


class ClientInputError(GatewayError):
    """The request itself is unusable (missing or rejected file part)."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class StorageOperationError(GatewayError):
    """A put/list/get/delete against the bucket failed."""

    status_code = 500

    def __init__(
        self,
        operation: str,
        detail: str,
        code: Optional[str] = None,
        key: Optional[str] = None,
    ):
        super().__init__(f"{operation} failed: {detail}")
        self.operation = operation
        self.detail = detail
        self.code = code
        self.key = key

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": type(self).__name__,
            "operation": self.operation,
            "code": self.code,
            "key": self.key,
            "detail": self.detail,
        }


class StorageNotFoundError(StorageOperationError):
    pass


class StoragePermissionError(StorageOperationError):
    pass


class StorageTransportError(StorageOperationError):
    pass


_NOT_FOUND_CODES = {"NoSuchKey", "NotFound", "NoSuchBucket", "404"}
_PERMISSION_CODES = {
    "AccessDenied",
    "InvalidAccessKeyId",
    "SignatureDoesNotMatch",
    "AllAccessDisabled",
    "403",
}


def translate_storage_error(
    exc: Exception, operation: str, key: Optional[str] = None
) -> StorageOperationError:
    """
    Turn a boto3/botocore exception into a typed storage error.

    Args:
        exc: The exception raised by the SDK
        operation: Name of the storage operation that failed
        key: Object key involved, if any

    Returns:
        The matching StorageOperationError variant
    """
    if isinstance(exc, ClientError):
        err = exc.response.get("Error", {}) or {}
        meta = exc.response.get("ResponseMetadata", {}) or {}
        code = str(err.get("Code", "") or "")
        detail = err.get("Message") or str(exc)
        http_status = meta.get("HTTPStatusCode")

        if code in _NOT_FOUND_CODES or http_status == 404:
            return StorageNotFoundError(operation, detail, code=code, key=key)
        if code in _PERMISSION_CODES or http_status == 403:
            return StoragePermissionError(operation, detail, code=code, key=key)
        return StorageTransportError(operation, detail, code=code, key=key)

    # boto3 re-raises multipart failures as S3UploadFailedError inside the
    # handler for the original ClientError
    if isinstance(exc, S3UploadFailedError):
        cause = exc.__cause__ or exc.__context__
        if isinstance(cause, ClientError):
            return translate_storage_error(cause, operation, key=key)

    if isinstance(exc, (NoCredentialsError, PartialCredentialsError)):
        return StoragePermissionError(
            operation, str(exc), code=type(exc).__name__, key=key
        )

    if isinstance(exc, BotoCoreError):
        return StorageTransportError(
            operation, str(exc), code=type(exc).__name__, key=key
        )

    return StorageTransportError(operation, str(exc), code=type(exc).__name__, key=key)
