import time
from typing import Optional


def current_epoch_millis() -> int:
    return int(time.time() * 1000)


def build_object_key(filename: str, now_ms: Optional[int] = None) -> str:
    """
    Build the bucket key for an uploaded file.

    The filename is used as-is: path separators, unicode and control
    characters are not sanitized.

    Args:
        filename: Original filename sent by the client
        now_ms: Epoch milliseconds to prefix with, defaults to now

    Returns:
        Key of the form "<epoch-millis>-<filename>"
    """
    if now_ms is None:
        now_ms = current_epoch_millis()
    return f"{now_ms}-{filename}"
