from __future__ import annotations

from typing import Optional


class SessionValidationError(ValueError):
    """Raised when an engine operation receives invalid input."""


class StoreError(Exception):
    """Raised when a remote session or streak store call fails."""

    def __init__(self, message: str, *, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
