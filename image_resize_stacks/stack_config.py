import json
import re
from typing import List, Optional

from aws_cdk import aws_logs as logs
from pydantic import BaseModel, Field, field_validator, model_validator

_DIMENSION_TOKEN = re.compile(r"[0-9]+x[0-9]+")


class LoggingConfig(BaseModel):
    level: str = "INFO"
    lambda_cloudwatch_log_retention_days: int = 90

    @field_validator("level")
    @classmethod
    def validate_level(cls, v):
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

    @property
    def cloudwatch_retention(self) -> logs.RetentionDays:
        retention_map = {
            1: logs.RetentionDays.ONE_DAY,
            3: logs.RetentionDays.THREE_DAYS,
            5: logs.RetentionDays.FIVE_DAYS,
            7: logs.RetentionDays.ONE_WEEK,
            14: logs.RetentionDays.TWO_WEEKS,
            30: logs.RetentionDays.ONE_MONTH,
            60: logs.RetentionDays.TWO_MONTHS,
            90: logs.RetentionDays.THREE_MONTHS,
            180: logs.RetentionDays.SIX_MONTHS,
            365: logs.RetentionDays.ONE_YEAR,
            0: logs.RetentionDays.INFINITE,
        }
        days = self.lambda_cloudwatch_log_retention_days
        if days in retention_map:
            return retention_map[days]

        # Closest higher value if exact match not found
        for known in sorted(d for d in retention_map if d):
            if known >= days:
                return retention_map[known]
        return logs.RetentionDays.INFINITE


class ResizeFunctionConfig(BaseModel):
    memory_size: int = Field(default=1024, ge=128, le=10240)
    timeout_seconds: int = Field(default=30, ge=1, le=900)
    allowed_dimensions: List[str] = Field(default_factory=list)
    response_mode: str = "signed"
    key_grammar: str = "plain"
    presigned_expiration_seconds: int = Field(default=3600, ge=1, le=604800)
    # Public URL serving the bucket in redirect mode (website endpoint or CDN)
    base_url: Optional[str] = None
    # Host that signed URLs are rewritten onto in signed mode
    redirect_base_url: Optional[str] = None
    # Lambda layer providing Pillow for the function runtime
    pillow_layer_arn: Optional[str] = None

    @field_validator("allowed_dimensions")
    @classmethod
    def validate_dimensions(cls, v):
        bad = [token for token in v if not _DIMENSION_TOKEN.fullmatch(token)]
        if bad:
            raise ValueError(f"Invalid dimension entries: {', '.join(bad)}")
        return v

    @field_validator("response_mode")
    @classmethod
    def validate_response_mode(cls, v):
        if v.lower() not in ("signed", "redirect"):
            raise ValueError("response_mode must be 'signed' or 'redirect'")
        return v.lower()

    @field_validator("key_grammar")
    @classmethod
    def validate_key_grammar(cls, v):
        if v.lower() not in ("plain", "extension"):
            raise ValueError("key_grammar must be 'plain' or 'extension'")
        return v.lower()


class CDKConfig(BaseModel):
    resource_prefix: str = "imgresize"
    environment: str = "dev"
    account_id: Optional[str] = None
    primary_region: str = "us-east-1"
    bucket_name: Optional[str] = None
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    resize: ResizeFunctionConfig = Field(default_factory=ResizeFunctionConfig)

    @field_validator("resource_prefix")
    @classmethod
    def validate_resource_prefix(cls, v):
        if not re.match(r"^[a-z0-9-]{1,20}$", v):
            raise ValueError(
                "resource_prefix must be 1-20 lowercase alphanumeric characters or hyphens"
            )
        return v

    @model_validator(mode="after")
    def check_reference_urls(self):
        if self.resize.response_mode == "redirect" and not self.resize.base_url:
            raise ValueError("resize.base_url is required in redirect mode")
        return self

    @classmethod
    def load_from_file(cls, filename="config.json"):
        try:
            with open(filename, "r", encoding="utf-8") as f:
                config_data = json.load(f)
            return cls(**config_data)
        except FileNotFoundError:
            return cls()
