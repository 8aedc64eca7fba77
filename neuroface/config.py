from __future__ import annotations

import os
from functools import lru_cache
from typing import List

from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "NEUROFACE_"


class Settings(BaseModel):
    allowed_origins: List[str] = Field(default_factory=lambda: ["*"])
    identity_scale: float = 1.0
    max_faces: int = Field(default=4, ge=1)
    cache_size: int = Field(default=16, ge=0)
    jpeg_quality: int = Field(default=95, ge=1, le=100)
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _split_origins(cls, value):
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()


def load_settings(environ=None) -> Settings:
    """Build settings from ``NEUROFACE_*`` environment variables."""
    environ = os.environ if environ is None else environ
    values = {}
    for name in Settings.model_fields:
        key = ENV_PREFIX + name.upper()
        if key in environ:
            values[name] = environ[key]
    return Settings(**values)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
