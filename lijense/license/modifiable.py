"""
Writable license used by the issuer before signing.
"""

from __future__ import annotations

from collections.abc import ItemsView
from datetime import date, datetime
from typing import Union

from lijense.common.config import Config
from lijense.license.properties import check_storable, store_properties

LicenseValue = Union[str, bool, int, float, date, None]


def format_value(value: LicenseValue) -> str | None:
    """Convert a typed value into the string stored in the license."""
    if value is None or isinstance(value, str):
        return value
    # bool is a subclass of int and has to be checked first
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, datetime):
        return value.date().strftime(Config.DATE_FORMAT)
    if isinstance(value, date):
        return value.strftime(Config.DATE_FORMAT)
    msg = f"Unsupported license value type: {type(value).__name__}"
    raise TypeError(msg)


class ModifiableLicense:
    """A mutable set of license entries.

    Values are stored as strings. Typed values are converted to their
    canonical string form when they are set, dates use ``yyyy-MM-dd``.
    """

    def __init__(self) -> None:
        self._entries: dict[str, str] = {}

    def set_value(self, key: str, value: LicenseValue) -> None:
        """Store the value under the key. ``None`` removes the key."""
        if not isinstance(key, str) or not key:
            msg = "The key must be a non-empty string."
            raise ValueError(msg)
        text = format_value(value)
        if text is None:
            self._entries.pop(key, None)
            return
        check_storable(key)
        check_storable(text)
        self._entries[key] = text

    def set_expiration_date(self, expiration_date: date | None) -> None:
        self.set_value(Config.LICENSE_KEY_EXPIRATION_DATE, expiration_date)

    def get_value(self, key: str) -> str | None:
        return self._entries.get(key)

    def remove_value(self, key: str) -> None:
        self._entries.pop(key, None)

    def items(self) -> ItemsView[str, str]:
        return self._entries.items()

    def to_bytes(self) -> bytes:
        """Serialize the entries into the canonical content that gets signed."""
        return store_properties(self._entries, Config.LICENSE_COMMENT)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"ModifiableLicense({self._entries!r})"
