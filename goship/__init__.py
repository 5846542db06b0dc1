"""goship: deployment configuration and post-deploy tracker notifications."""

from __future__ import annotations

from .errors import (
    AuthConfigError,
    ExternalAPIError,
    GoshipError,
    NotFoundError,
    StoreError,
)

__version__ = "0.1.0"

__all__ = [
    "AuthConfigError",
    "ExternalAPIError",
    "GoshipError",
    "NotFoundError",
    "StoreError",
    "__version__",
]
