import json
from http import HTTPStatus
from typing import Any, Dict

from models import ErrorCategory, ResizeOutcome, ResponseMode

JSON_HEADERS = {"Content-Type": "application/json"}

_CLIENT_ERROR_STATUS = {
    ErrorCategory.INVALID_PATH: HTTPStatus.BAD_REQUEST,
    ErrorCategory.INVALID_DIMENSIONS: HTTPStatus.BAD_REQUEST,
    ErrorCategory.UNSUPPORTED_FORMAT: HTTPStatus.BAD_REQUEST,
    ErrorCategory.NOT_FOUND: HTTPStatus.NOT_FOUND,
}


def error_response(category: ErrorCategory, message: str) -> Dict[str, Any]:
    status = _CLIENT_ERROR_STATUS.get(category)
    if status is None:
        raise ValueError(f"{category.value} is not reported as a response")
    return {
        "statusCode": int(status),
        "headers": dict(JSON_HEADERS),
        "body": json.dumps({"errorCategory": category.value, "message": message}),
    }


def redirect_response(location: str) -> Dict[str, Any]:
    return {
        "statusCode": int(HTTPStatus.MOVED_PERMANENTLY),
        "headers": {"location": location},
        "body": "",
    }


def created_response(location: str) -> Dict[str, Any]:
    return {
        "statusCode": int(HTTPStatus.CREATED),
        "headers": dict(JSON_HEADERS),
        "body": json.dumps({"result": "Created", "location": location}),
    }


def build_response(outcome: ResizeOutcome, mode: ResponseMode) -> Dict[str, Any]:
    """Map a pipeline outcome onto an API Gateway proxy response."""
    if not outcome.succeeded:
        return error_response(outcome.category, outcome.message or "")
    if mode is ResponseMode.REDIRECT:
        return redirect_response(outcome.location)
    return created_response(outcome.location)
