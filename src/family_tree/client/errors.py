"""Errors raised by the family tree store client."""
from __future__ import annotations


class FamilyTreeAPIError(Exception):
    """Base exception for store errors."""

    def __init__(self, message: str, status_code: int = 0, status_text: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.status_text = status_text


class ApiError(FamilyTreeAPIError):
    """The store answered with a non-success status."""


class NetworkError(FamilyTreeAPIError):
    """No response: connection refused, DNS failure, timeout, etc."""

    def __init__(self, message: str) -> None:
        super().__init__(message, 0, "Network Error")
