#!/usr/bin/env python3
"""
Asana REST Client Exception Classes

Exception hierarchy for failures surfaced by the request pipeline.
Transport failures are not wrapped: requests exceptions propagate as-is.
"""

from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .models import ErrorRecord


class AsanaError(Exception):
    """Base exception for Asana client errors."""

    pass


class AsanaAuthError(AsanaError):
    """Raised when the API answers 401 Unauthorized."""

    def __init__(self, message: str = "asana: unauthorized"):
        super().__init__(message)


class AsanaAPIError(AsanaError):
    """
    Raised when a response envelope carries one or more error records.

    Always holds at least one record, plus the HTTP status code of the
    response that carried them (which may be 200).
    """

    def __init__(self, errors: List["ErrorRecord"], status_code: int):
        self.errors = list(errors)
        self.status_code = status_code
        super().__init__(str(self))

    def __str__(self) -> str:
        details = ", ".join(str(e) for e in self.errors)
        return f"code: {self.status_code}, {details}"


class AsanaDecodeError(AsanaError):
    """Raised when a response body cannot be decoded into the expected shape."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
