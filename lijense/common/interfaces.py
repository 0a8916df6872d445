"""
Interfaces and protocols for license consumers.
"""

from __future__ import annotations

from datetime import date
from typing import Protocol, runtime_checkable


@runtime_checkable
class ILicenseReader(Protocol):
    """Protocol for read-only, verified license content."""

    def get_value(self, key: str) -> str | None: ...

    def is_feature_active(self, key: str) -> bool: ...

    def is_expired(self, today: date | None = None) -> bool: ...
