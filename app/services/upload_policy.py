from pathlib import PurePosixPath
from typing import Optional

from app.config import Settings
from app.exceptions import ClientInputError


def _normalize_extension(extension: str) -> str:
    extension = extension.strip().lower()
    if extension and not extension.startswith("."):
        extension = f".{extension}"
    return extension


def check_upload_allowed(filename: str, size: Optional[int], settings: Settings) -> None:
    """
    Apply the optional extension and size restrictions.

    Both checks are skipped when the corresponding setting is unset.

    Raises:
        ClientInputError: If the file is rejected
    """
    if settings.allowed_extensions:
        allowed = {_normalize_extension(ext) for ext in settings.allowed_extensions}
        extension = PurePosixPath(filename).suffix.lower()
        if extension not in allowed:
            raise ClientInputError(
                "File upload only supports the following file types: "
                + ", ".join(sorted(allowed))
            )

    if settings.max_upload_size is not None and size is not None:
        if size > settings.max_upload_size:
            raise ClientInputError(
                f"File exceeds the maximum upload size of {settings.max_upload_size} bytes"
            )
