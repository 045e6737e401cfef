"""Generic API response envelope model.

Usage and error responses are wrapped in this envelope:
{ success: bool, data: T | None, error: str | None, meta: dict | None }
Configuration documents are returned bare so subscribers can consume them directly.
"""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """JSON envelope for usage, health and error responses."""

    success: bool
    data: T | None = None
    error: str | None = None
    meta: dict | None = None
