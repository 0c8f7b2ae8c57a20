from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", frozen=True, extra="ignore")

    aws_access_key_id: str = "placeholder"
    aws_secret_access_key: str = "placeholder"
    aws_region: str = "us-east-1"
    s3_bucket_name: str = "placeholder-bucket"
    s3_endpoint_url: Optional[str] = None

    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    # Managed multipart transfer
    upload_progress_enabled: bool = True
    multipart_threshold: int = 5 * 1024 * 1024
    multipart_chunk_size: int = 5 * 1024 * 1024
    multipart_max_concurrency: int = 4

    # Optional upload restrictions, off unless set
    allowed_extensions: Optional[List[str]] = None
    max_upload_size: Optional[int] = None


@lru_cache
def get_settings() -> Settings:
    return Settings()
