"""
Exception taxonomy for the resize pipeline.

Client faults are part of the request contract: the orchestrator turns them
into structured 4xx outcomes. Backend faults mean the pipeline could not
finish for operational reasons and are left to propagate to the Lambda runtime.
"""

from typing import Iterable

from models import ErrorCategory


class ImageResizeError(Exception):
    category: ErrorCategory

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ClientFault(ImageResizeError):
    """Request can never succeed as sent; the caller has to change it."""


class InvalidPath(ClientFault):
    category = ErrorCategory.INVALID_PATH

    def __init__(self, key: str = ""):
        self.key = key
        super().__init__("Path did not match expected format.")


class InvalidDimensions(ClientFault):
    category = ErrorCategory.INVALID_DIMENSIONS

    def __init__(self, requested: str, allowed: Iterable[str]):
        self.requested = requested
        self.allowed = tuple(allowed)
        super().__init__(f"Allowed dimensions: {', '.join(self.allowed)}")


class UnsupportedFormat(ClientFault):
    category = ErrorCategory.UNSUPPORTED_FORMAT

    def __init__(self, supported: Iterable[str], detail: str, label: str = "image formats"):
        self.supported = tuple(supported)
        # operator-facing reason, never returned to the caller
        self.detail = detail
        super().__init__(f"Supported {label}: {', '.join(self.supported)}")


class AssetNotFound(ClientFault):
    category = ErrorCategory.NOT_FOUND

    def __init__(self, bucket: str, key: str):
        self.bucket = bucket
        self.key = key
        super().__init__(f"Asset not found in bucket {bucket} with key {key}")


class BackendFault(ImageResizeError):
    """Transform or storage failed; not converted into a response."""


class TransformFailure(BackendFault):
    category = ErrorCategory.TRANSFORM_FAILURE


class StoreFailure(BackendFault):
    category = ErrorCategory.STORE_FAILURE
