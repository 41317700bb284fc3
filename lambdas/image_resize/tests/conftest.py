import pytest

from config import ResizeConfig
from fakes import (
    BUCKET,
    REDIRECT_BASE_URL,
    FakeLambdaContext,
    InMemoryStorage,
    RecordingTransformer,
)


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def transformer() -> RecordingTransformer:
    return RecordingTransformer()


@pytest.fixture
def signed_config() -> ResizeConfig:
    return ResizeConfig(
        bucket=BUCKET,
        redirect_base_url=REDIRECT_BASE_URL,
        presigned_expiration_seconds=30,
    )


@pytest.fixture
def lambda_context() -> FakeLambdaContext:
    return FakeLambdaContext()
