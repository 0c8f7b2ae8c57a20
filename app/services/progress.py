import threading
from typing import Optional

import structlog

logger = structlog.get_logger()


class UploadProgress:
    """
    Transfer callback for boto3 managed uploads.

    s3transfer calls the instance from its worker threads with the number of
    bytes sent since the previous call.
    """

    def __init__(self, key: str, total: Optional[int]):
        self.key = key
        self.total = total
        self.loaded = 0
        self._lock = threading.Lock()

    @property
    def percentage(self) -> Optional[float]:
        if not self.total:
            return None
        return round(self.loaded / self.total * 100, 2)

    def __call__(self, bytes_amount: int) -> None:
        with self._lock:
            self.loaded += bytes_amount
            loaded = self.loaded
            percentage = self.percentage

        logger.info(
            "Upload progress",
            key=self.key,
            loaded=loaded,
            total=self.total,
            percentage=f"{percentage:.2f}%" if percentage is not None else None,
        )
