import io
from unittest.mock import MagicMock
from urllib.parse import parse_qs, urlsplit

import boto3
import pytest
from botocore.config import Config
from botocore.exceptions import EndpointConnectionError
from botocore.response import StreamingBody
from botocore.stub import Stubber

import s3_operations
from errors import AssetNotFound, StoreFailure
from s3_operations import S3AssetStorage

BUCKET = "example-bucket"


@pytest.fixture
def s3_client():
    return boto3.client(
        "s3",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
        config=Config(signature_version="s3v4", s3={"addressing_style": "path"}),
    )


@pytest.fixture
def stubbed(s3_client):
    with Stubber(s3_client) as stubber:
        yield S3AssetStorage(BUCKET, client=s3_client), stubber
        stubber.assert_no_pending_responses()


def test_get_returns_record(stubbed):
    storage, stubber = stubbed
    data = b"original image data"
    stubber.add_response(
        "get_object",
        {
            "Body": StreamingBody(io.BytesIO(data), len(data)),
            "ContentType": "image/jpeg; name=something",
            "Metadata": {"example": "value"},
        },
        {"Bucket": BUCKET, "Key": "assets/something/img123"},
    )

    record = storage.get("assets/something/img123")

    assert record.body == data
    assert record.content_type == "image/jpeg; name=something"
    assert dict(record.metadata) == {"example": "value"}


def test_get_missing_key_is_not_found(stubbed):
    storage, stubber = stubbed
    stubber.add_client_error(
        "get_object",
        service_error_code="NoSuchKey",
        service_message="The specified key does not exist.",
        http_status_code=404,
        expected_params={"Bucket": BUCKET, "Key": "assets/missing"},
    )

    with pytest.raises(AssetNotFound) as exc_info:
        storage.get("assets/missing")

    assert exc_info.value.message == (
        "Asset not found in bucket example-bucket with key assets/missing"
    )


def test_get_other_errors_are_store_failures(stubbed):
    storage, stubber = stubbed
    stubber.add_client_error(
        "get_object", service_error_code="AccessDenied", http_status_code=403
    )

    with pytest.raises(StoreFailure):
        storage.get("assets/secret")


def test_put_writes_body_type_and_metadata(stubbed):
    storage, stubber = stubbed
    stubber.add_response(
        "put_object",
        {},
        {
            "Bucket": BUCKET,
            "Key": "resize/something/50x60-img123",
            "Body": b"resized",
            "ContentType": "image/jpeg",
            "Metadata": {"resized-from": "assets/something/img123"},
        },
    )

    storage.put(
        "resize/something/50x60-img123",
        b"resized",
        "image/jpeg",
        {"resized-from": "assets/something/img123"},
    )


def test_put_failure_is_store_failure(stubbed):
    storage, stubber = stubbed
    stubber.add_client_error("put_object", service_error_code="InternalError", http_status_code=500)

    with pytest.raises(StoreFailure):
        storage.put("resize/a/1x1-b", b"x", "image/png", {})


def test_signed_url_is_path_style_and_expires(s3_client):
    storage = S3AssetStorage(BUCKET, client=s3_client)

    url = storage.signed_url("resize/something/50x60-img123", 30)

    parts = urlsplit(url)
    assert parts.path == f"/{BUCKET}/resize/something/50x60-img123"
    query = parse_qs(parts.query)
    assert query["X-Amz-Expires"] == ["30"]
    assert "X-Amz-Signature" in query


def test_get_transport_errors_are_logged_store_failures(monkeypatch):
    client = MagicMock()
    client.get_object.side_effect = EndpointConnectionError(
        endpoint_url="https://s3.us-east-1.amazonaws.com"
    )
    log = MagicMock()
    monkeypatch.setattr(s3_operations, "logger", log)

    with pytest.raises(StoreFailure):
        S3AssetStorage(BUCKET, client=client).get("assets/something/img123")

    log.error.assert_called_once()
    assert "s3://example-bucket/assets/something/img123" in log.error.call_args[0][0]
