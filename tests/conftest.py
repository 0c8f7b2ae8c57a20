import io
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from botocore.response import StreamingBody
from fastapi.testclient import TestClient

from app.config import Settings, get_settings
from app.dependencies import get_s3_service
from app.exceptions import StorageNotFoundError
from app.main import app
from app.services.s3_service import S3Service, StoredObjectStream


class InMemoryS3Service(S3Service):
    """S3Service double that keeps objects in a dict instead of a bucket."""

    def __init__(self, settings: Settings):
        super().__init__(settings, client=MagicMock())
        self.objects = {}
        self.calls = []
        self.fail_with = None

    def _record(self, operation, **kwargs):
        self.calls.append((operation, kwargs))
        if self.fail_with is not None:
            raise self.fail_with

    def put(self, key, data, content_type="application/octet-stream"):
        self.objects[key] = {
            "data": data,
            "content_type": content_type,
            "last_modified": datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
        }

    async def upload(self, key, fileobj, content_type, size=None, track_progress=True):
        self._record("upload", key=key, size=size, track_progress=track_progress)
        self.put(key, fileobj.read(), content_type)

    async def list_objects(self):
        self._record("list")
        return [
            {
                "Key": key,
                "Size": len(obj["data"]),
                "LastModified": obj["last_modified"],
            }
            for key, obj in sorted(self.objects.items())
        ]

    async def download(self, key):
        self._record("download", key=key)
        if key not in self.objects:
            raise StorageNotFoundError(
                "download", "The specified key does not exist.", code="NoSuchKey", key=key
            )
        data = self.objects[key]["data"]
        return StoredObjectStream(
            key=key,
            body=StreamingBody(io.BytesIO(data), len(data)),
            content_type=self.objects[key]["content_type"],
            content_length=len(data),
        )

    async def delete(self, key):
        self._record("delete", key=key)
        self.objects.pop(key, None)


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        aws_region="eu-west-1",
        s3_bucket_name="test-bucket",
        aws_access_key_id="test",
        aws_secret_access_key="test",
    )


@pytest.fixture
def storage(settings):
    return InMemoryS3Service(settings)


@pytest.fixture
def make_client(storage):
    clients = []

    def _make(settings):
        app.dependency_overrides[get_settings] = lambda: settings
        app.dependency_overrides[get_s3_service] = lambda: storage
        client = TestClient(app)
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.close()
    app.dependency_overrides.clear()


@pytest.fixture
def client(make_client, settings):
    return make_client(settings)
