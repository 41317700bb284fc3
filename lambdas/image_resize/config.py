import os
import re
from typing import Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from models import KeyGrammar, ResponseMode

PRESIGNED_EXPIRATION_DEFAULT = 3_600  # 1 h
PRESIGNED_EXPIRATION_MAX = 604_800  # 7 d

_DIMENSION_TOKEN = re.compile(r"[0-9]+x[0-9]+")


def parse_allowed_dimensions(raw: Optional[str]) -> Tuple[str, ...]:
    """
    Split 'ALLOWED_DIMENSIONS' into an ordered tuple of unique 'WxH' tokens.

    Whitespace around commas is ignored and so are empty entries.
    """
    tokens = [token.strip() for token in (raw or "").split(",")]
    return tuple(dict.fromkeys(token for token in tokens if token))


class ResizeConfig(BaseModel):
    """Process-wide settings, resolved once per execution environment."""

    model_config = ConfigDict(frozen=True)

    bucket: str = Field(min_length=1)
    allowed_dimensions: Tuple[str, ...] = ()
    response_mode: ResponseMode = ResponseMode.SIGNED
    base_url: Optional[str] = None
    redirect_base_url: Optional[str] = None
    presigned_expiration_seconds: int = Field(
        default=PRESIGNED_EXPIRATION_DEFAULT, ge=1, le=PRESIGNED_EXPIRATION_MAX
    )
    key_grammar: KeyGrammar = KeyGrammar.PLAIN

    @field_validator("allowed_dimensions")
    @classmethod
    def validate_dimension_tokens(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        bad = [token for token in v if not _DIMENSION_TOKEN.fullmatch(token)]
        if bad:
            raise ValueError(
                f"ALLOWED_DIMENSIONS entries must look like 50x60, got: {', '.join(bad)}"
            )
        return v

    @field_validator("base_url", "redirect_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip().rstrip("/")
        return v or None

    @model_validator(mode="after")
    def check_reference_settings(self) -> "ResizeConfig":
        if self.response_mode is ResponseMode.REDIRECT and not self.base_url:
            raise ValueError("URL is required when RESPONSE_MODE is 'redirect'")
        if self.response_mode is ResponseMode.SIGNED and not self.redirect_base_url:
            raise ValueError("REDIRECT_BASE_URL is required when RESPONSE_MODE is 'signed'")
        return self

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ResizeConfig":
        env = os.environ if environ is None else environ
        values = {
            "bucket": env.get("BUCKET", ""),
            "allowed_dimensions": parse_allowed_dimensions(env.get("ALLOWED_DIMENSIONS")),
            "response_mode": env.get("RESPONSE_MODE", ResponseMode.SIGNED.value).lower(),
            "base_url": env.get("URL"),
            "redirect_base_url": env.get("REDIRECT_BASE_URL"),
            "key_grammar": env.get("KEY_GRAMMAR", KeyGrammar.PLAIN.value).lower(),
        }
        if env.get("PRESIGNED_EXPIRATION_SECONDS"):
            values["presigned_expiration_seconds"] = env["PRESIGNED_EXPIRATION_SECONDS"]
        return cls(**values)
