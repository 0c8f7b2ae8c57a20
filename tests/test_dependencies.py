from unittest.mock import patch

import pytest

from app.dependencies import get_s3_service, reset_s3_service


@pytest.fixture(autouse=True)
def fresh_service():
    reset_s3_service()
    yield
    reset_s3_service()


def test_s3_service_is_reused_for_same_settings(settings):
    """Test the service is built once per settings object."""
    with patch("app.services.s3_service.boto3.client") as mock_client:
        first = get_s3_service(settings)
        second = get_s3_service(settings)

    assert first is second
    assert mock_client.call_count == 1
    assert first.bucket_name == "test-bucket"


def test_s3_service_is_rebuilt_for_new_settings(settings):
    """Test a different settings object produces a new service."""
    other = settings.model_copy(update={"s3_bucket_name": "other-bucket"})

    with patch("app.services.s3_service.boto3.client") as mock_client:
        first = get_s3_service(settings)
        second = get_s3_service(other)

    assert first is not second
    assert second.bucket_name == "other-bucket"
    assert second.settings is other
    assert mock_client.call_count == 2


def test_reset_drops_cached_service(settings):
    """Test reset forces the next call to build a new service."""
    with patch("app.services.s3_service.boto3.client"):
        first = get_s3_service(settings)
        reset_s3_service()
        second = get_s3_service(settings)

    assert first is not second
