"""Pydantic models for configuration validation."""

from typing import List
from pydantic import BaseModel, Field, field_validator, ConfigDict


class ProxyConfig(BaseModel):
    """Remote image fetching configuration."""

    enabled: bool = True
    timeout_seconds: float = Field(default=30.0, gt=0)
    max_image_bytes: int = Field(default=10 * 1024 * 1024, gt=0)
    cache_ttl_seconds: int = Field(default=3600, ge=0)
    cache_max_entries: int = Field(default=64, ge=0)
    cache_max_bytes: int = Field(default=64 * 1024 * 1024, ge=0)
    allowed_schemes: List[str] = Field(default_factory=lambda: ["http", "https"])
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
    )
    accept: str = "image/png,image/jpeg,image/webp,image/*,*/*;q=0.8"

    @field_validator('allowed_schemes')
    @classmethod
    def validate_schemes(cls, v: List[str]) -> List[str]:
        """Only plain web schemes may be proxied."""
        schemes = [s.lower().rstrip(':') for s in v]
        unsupported = [s for s in schemes if s not in ("http", "https")]
        if unsupported:
            raise ValueError(f"unsupported proxy schemes: {', '.join(unsupported)}")
        if not schemes:
            raise ValueError('at least one scheme must be allowed')
        return schemes


class UploadConfig(BaseModel):
    """Card upload limits."""

    max_bytes: int = Field(default=20 * 1024 * 1024, gt=0)


class SystemConfig(BaseModel):
    """Top-level system configuration."""

    model_config = ConfigDict(extra='ignore')

    proxy: ProxyConfig = Field(default_factory=ProxyConfig)
    upload: UploadConfig = Field(default_factory=UploadConfig)
    debug: bool = False
    api_host: str = "localhost"
    api_port: int = Field(default=8080, gt=0, le=65535)
