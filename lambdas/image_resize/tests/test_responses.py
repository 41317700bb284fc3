import json

import pytest
from pydantic import ValidationError

from models import ErrorCategory, ResizeOutcome, ResponseMode
from responses import build_response, error_response

KEY = "resize/something/50x60-img123"


@pytest.mark.parametrize(
    "category, message, status",
    [
        (ErrorCategory.INVALID_PATH, "Path did not match expected format.", 400),
        (ErrorCategory.INVALID_DIMENSIONS, "Allowed dimensions: 30x40, 50x60", 400),
        (ErrorCategory.UNSUPPORTED_FORMAT, "Supported image formats: jpeg, png, webp, tiff", 400),
        (ErrorCategory.NOT_FOUND, "Asset not found in bucket b with key assets/x", 404),
    ],
)
def test_client_faults_are_json_errors(category, message, status):
    response = build_response(
        ResizeOutcome.failure(KEY, category, message), ResponseMode.SIGNED
    )

    assert response["statusCode"] == status
    assert response["headers"] == {"Content-Type": "application/json"}
    assert json.loads(response["body"]) == {
        "errorCategory": category.value,
        "message": message,
    }


def test_invalid_path_uses_legacy_category_name():
    response = error_response(ErrorCategory.INVALID_PATH, "Path did not match expected format.")

    assert json.loads(response["body"])["errorCategory"] == "InvalidResizePath"


@pytest.mark.parametrize(
    "category", [ErrorCategory.TRANSFORM_FAILURE, ErrorCategory.STORE_FAILURE]
)
def test_backend_faults_have_no_response(category):
    with pytest.raises(ValueError):
        error_response(category, "boom")


def test_redirect_success_is_301_with_empty_body():
    location = f"https://cdn.example.com/{KEY}"

    response = build_response(ResizeOutcome.success(KEY, location), ResponseMode.REDIRECT)

    assert response == {
        "statusCode": 301,
        "headers": {"location": location},
        "body": "",
    }


def test_signed_success_is_201_with_location_in_body():
    location = f"https://configurable.url.com/bucket/{KEY}?Signature=x"

    response = build_response(ResizeOutcome.success(KEY, location), ResponseMode.SIGNED)

    assert response["statusCode"] == 201
    assert response["headers"] == {"Content-Type": "application/json"}
    assert json.loads(response["body"]) == {"result": "Created", "location": location}


def test_outcome_needs_exactly_one_result():
    with pytest.raises(ValidationError):
        ResizeOutcome(request_key=KEY)
    with pytest.raises(ValidationError):
        ResizeOutcome(
            request_key=KEY,
            location="https://cdn.example.com/x",
            category=ErrorCategory.NOT_FOUND,
            message="Asset not found",
        )
