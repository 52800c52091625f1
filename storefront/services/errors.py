"""Storefront error types."""

from __future__ import annotations

from typing import Any, Optional


class StorefrontError(Exception):
    """Base class for storefront errors."""


class ValidationError(StorefrontError, ValueError):
    """Cart or order input rejected before any state change."""


class PersistenceError(StorefrontError):
    """A write of the order collection did not reach the store.

    Ledger write operations return this instead of raising it; ``order``
    holds the value that was computed but not durably recorded.
    """

    def __init__(self, message: str, *, key: str, order: Optional[Any] = None) -> None:
        super().__init__(message)
        self.key = key
        self.order = order
