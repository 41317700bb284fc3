from typing import Any, Mapping, Optional

import boto3
from aws_lambda_powertools import Logger, Tracer
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from errors import AssetNotFound, StoreFailure
from models import AssetRecord

logger = Logger()
tracer = Tracer()

# SigV4 is required for presigning in every region. Path-style addressing keeps
# the bucket name in the URL path so it survives the redirect-base rewrite.
_SIGV4_CFG = Config(
    signature_version="s3v4",
    s3={"addressing_style": "path"},
)

_MISSING_KEY_CODES = {"NoSuchKey", "404", "NotFound"}


def _error_code(err: ClientError) -> str:
    return err.response.get("Error", {}).get("Code", "")


class S3AssetStorage:
    """Originals and derivatives living in a single S3 bucket."""

    def __init__(self, bucket: str, client: Optional[Any] = None):
        self.bucket = bucket
        self._s3 = client or boto3.client("s3", config=_SIGV4_CFG)

    @tracer.capture_method
    def get(self, key: str) -> AssetRecord:
        try:
            response = self._s3.get_object(Bucket=self.bucket, Key=key)
            body = response["Body"].read()
        except ClientError as err:
            if _error_code(err) in _MISSING_KEY_CODES:
                raise AssetNotFound(self.bucket, key) from err
            logger.error(
                f"S3 get_object failed for s3://{self.bucket}/{key}: {err}"
            )
            raise StoreFailure(f"Failed to read {key}: {err}") from err
        except BotoCoreError as err:
            logger.error(
                f"S3 get_object failed for s3://{self.bucket}/{key}: {err}"
            )
            raise StoreFailure(f"Failed to read {key}: {err}") from err

        return AssetRecord(
            content_type=response.get("ContentType", ""),
            body=body,
            metadata=response.get("Metadata") or {},
        )

    @tracer.capture_method
    def put(
        self, key: str, body: bytes, content_type: str, metadata: Mapping[str, str]
    ) -> None:
        try:
            self._s3.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=body,
                ContentType=content_type,
                Metadata=dict(metadata),
            )
        except (BotoCoreError, ClientError) as err:
            logger.error(f"S3 put_object failed for s3://{self.bucket}/{key}: {err}")
            raise StoreFailure(f"Failed to write {key}: {err}") from err

        logger.info(
            "Stored derivative",
            extra={"bucket": self.bucket, "key": key, "size": len(body)},
        )

    @tracer.capture_method
    def signed_url(self, key: str, expires_in: int) -> str:
        try:
            url = self._s3.generate_presigned_url(
                ClientMethod="get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=expires_in,
            )
        except (BotoCoreError, ClientError) as err:
            raise StoreFailure(f"Failed to presign {key}: {err}") from err

        logger.debug(
            f"Generated URL for s3://{self.bucket}/{key} valid {expires_in}s"
        )
        return url
