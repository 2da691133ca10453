import io
import re

import boto3
import pytest
from botocore.config import Config
from botocore.response import StreamingBody
from botocore.stub import ANY, Stubber

from app.core.exceptions import StorageError, StorageObjectNotFoundError
from app.services.storage_service import S3StorageService

KEY_PATTERN = re.compile(r"^contracts/\d{14}_[0-9a-f]{8}_lease\.pdf$")


@pytest.fixture
def s3_client():
    return boto3.client(
        "s3",
        endpoint_url="https://s3.example.test",
        region_name="us-east-1",
        aws_access_key_id="test-access-key",
        aws_secret_access_key="test-secret-key",
        config=Config(signature_version="s3v4"),
    )


@pytest.fixture
def storage_service(s3_client):
    return S3StorageService(s3_client, "contracts-bucket")


def test_generate_file_key_format():
    first = S3StorageService.generate_file_key("lease.pdf")
    second = S3StorageService.generate_file_key("lease.pdf")

    assert KEY_PATTERN.match(first)
    assert first != second


def test_upload_puts_object_and_returns_key(s3_client, storage_service):
    with Stubber(s3_client) as stubber:
        stubber.add_response(
            "put_object",
            {"ETag": '"etag"'},
            {"Bucket": "contracts-bucket", "Key": ANY, "Body": b"pdf-bytes", "ContentType": "application/pdf"},
        )
        key = storage_service.upload(b"pdf-bytes", "lease.pdf", "application/pdf")
        stubber.assert_no_pending_responses()

    assert KEY_PATTERN.match(key)


def test_upload_failure_raises_storage_error(s3_client, storage_service):
    with Stubber(s3_client) as stubber:
        stubber.add_client_error("put_object", service_error_code="AccessDenied", http_status_code=403)
        with pytest.raises(StorageError):
            storage_service.upload(b"pdf-bytes", "lease.pdf")


def test_download_returns_body(s3_client, storage_service):
    body = StreamingBody(io.BytesIO(b"pdf-bytes"), len(b"pdf-bytes"))
    with Stubber(s3_client) as stubber:
        stubber.add_response(
            "get_object",
            {"Body": body},
            {"Bucket": "contracts-bucket", "Key": "contracts/sample.pdf"},
        )
        assert storage_service.download("contracts/sample.pdf") == b"pdf-bytes"


def test_download_missing_object_raises_not_found(s3_client, storage_service):
    with Stubber(s3_client) as stubber:
        stubber.add_client_error("get_object", service_error_code="NoSuchKey", http_status_code=404)
        with pytest.raises(StorageObjectNotFoundError) as exc_info:
            storage_service.download("contracts/missing.pdf")

    assert exc_info.value.key == "contracts/missing.pdf"


def test_download_other_failure_is_generic_storage_error(s3_client, storage_service):
    with Stubber(s3_client) as stubber:
        stubber.add_client_error("get_object", service_error_code="InternalError", http_status_code=500)
        with pytest.raises(StorageError) as exc_info:
            storage_service.download("contracts/sample.pdf")

    assert not isinstance(exc_info.value, StorageObjectNotFoundError)


def test_presigned_url_contains_key_and_expiry(storage_service):
    url = storage_service.generate_presigned_get_url("contracts/sample.pdf", 10)

    assert "contracts/sample.pdf" in url
    assert "600" in url


def test_presigned_url_for_missing_key_is_none(storage_service):
    assert storage_service.generate_presigned_get_url(None, 10) is None
