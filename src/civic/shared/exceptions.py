"""
Shared application exceptions, mapped to HTTP responses in civic.main.
"""

from __future__ import annotations

from typing import Any, Optional


class AppError(Exception):
    """Base application error carrying a user-safe message and optional details."""

    def __init__(self, message: str = "Application error", details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        return self.message


class NotFoundError(AppError):
    pass


class ValidationError(AppError):
    pass


class PermissionDeniedError(AppError):
    pass
