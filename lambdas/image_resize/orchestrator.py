"""
Fetch -> transform -> store pipeline for resized derivatives.

Each call to ``DerivativeOrchestrator.process`` walks the states in order:

    parse key -> check dimensions -> fetch original -> resolve format
    -> transform -> annotate metadata -> store derivative -> build reference

Client faults end the run with a ``ResizeOutcome`` describing the rejection.
Backend faults (``TransformFailure``/``StoreFailure``) are raised to the caller.
Nothing is retried.
"""

from typing import Dict, Mapping, Protocol
from urllib.parse import urlsplit

from aws_lambda_powertools import Logger

from config import ResizeConfig
from errors import BackendFault, ClientFault, StoreFailure, TransformFailure
from key_grammar import parse_key
from models import (
    RESIZED_FROM_METADATA,
    AssetRecord,
    ImageFormat,
    KeyGrammar,
    ResizeOutcome,
    ResponseMode,
)
from validators import check_dimensions, resolve_extension, resolve_format

logger = Logger()


class AssetStorage(Protocol):
    def get(self, key: str) -> AssetRecord: ...

    def put(
        self, key: str, body: bytes, content_type: str, metadata: Mapping[str, str]
    ) -> None: ...

    def signed_url(self, key: str, expires_in: int) -> str: ...


class ImageTransformer(Protocol):
    def resize(self, body: bytes, width: int, height: int, fmt: ImageFormat) -> bytes: ...


def annotate_metadata(metadata: Mapping[str, str], original_key: str) -> Dict[str, str]:
    """Copy of the original's metadata with the provenance entry set."""
    annotated = dict(metadata)
    annotated[RESIZED_FROM_METADATA] = original_key
    return annotated


def rewrite_onto_base(url: str, base_url: str) -> str:
    """Keep the path and query of ``url`` but serve it from ``base_url``."""
    parts = urlsplit(url)
    rewritten = f"{base_url}{parts.path}"
    if parts.query:
        rewritten = f"{rewritten}?{parts.query}"
    return rewritten


class DerivativeOrchestrator:
    def __init__(
        self,
        config: ResizeConfig,
        storage: AssetStorage,
        transformer: ImageTransformer,
    ):
        self.config = config
        self.storage = storage
        self.transformer = transformer

    def process(self, request_key: str) -> ResizeOutcome:
        try:
            location = self._run(request_key)
        except ClientFault as fault:
            logger.info(
                "Rejected resize request",
                extra={
                    "key": request_key,
                    "category": fault.category.value,
                    "reason": fault.message,
                },
            )
            return ResizeOutcome.failure(request_key, fault.category, fault.message)

        return ResizeOutcome.success(request_key, location)

    def _run(self, request_key: str) -> str:
        parsed = parse_key(request_key, self.config.key_grammar)
        check_dimensions(parsed.width, parsed.height, self.config.allowed_dimensions)

        # With extension keys the output format is known before touching storage
        fmt = None
        if self.config.key_grammar is KeyGrammar.EXTENSION:
            fmt = resolve_extension(parsed.extension)

        original_key = parsed.original_key
        logger.info(
            "Fetching original",
            extra={"original_key": original_key, "dimensions": parsed.dimensions},
        )
        original = self._fetch(original_key)

        if fmt is None:
            fmt = resolve_format(original.content_type)
            content_type = original.content_type
        else:
            content_type = fmt.mime_type

        resized = self._transform(original.body, parsed.width, parsed.height, fmt)
        self._store(
            request_key,
            resized,
            content_type,
            annotate_metadata(original.metadata, original_key),
        )
        return self._reference(request_key)

    def _reference(self, request_key: str) -> str:
        if self.config.response_mode is ResponseMode.REDIRECT:
            return f"{self.config.base_url}/{request_key}"

        signed = self.storage.signed_url(
            request_key, self.config.presigned_expiration_seconds
        )
        return rewrite_onto_base(signed, self.config.redirect_base_url)

    def _fetch(self, key: str) -> AssetRecord:
        try:
            return self.storage.get(key)
        except (ClientFault, BackendFault):
            raise
        except Exception as err:
            raise StoreFailure(f"Failed to read {key}: {err}") from err

    def _transform(self, body: bytes, width: int, height: int, fmt: ImageFormat) -> bytes:
        try:
            return self.transformer.resize(body, width, height, fmt)
        except BackendFault:
            raise
        except Exception as err:
            raise TransformFailure(f"Could not resize to {width}x{height}: {err}") from err

    def _store(
        self, key: str, body: bytes, content_type: str, metadata: Mapping[str, str]
    ) -> None:
        try:
            self.storage.put(key, body, content_type, metadata)
        except BackendFault:
            raise
        except Exception as err:
            raise StoreFailure(f"Failed to write {key}: {err}") from err
