"""Configuration loading and validation."""

from .models import (
    SystemConfig,
    ProxyConfig,
    UploadConfig,
)
from .loader import ConfigLoader, ConfigLoadError, ConfigValidationError

__all__ = [
    "SystemConfig",
    "ProxyConfig",
    "UploadConfig",
    "ConfigLoader",
    "ConfigLoadError",
    "ConfigValidationError",
]
