"""
Read-only license returned after loading a license file.
"""

from __future__ import annotations

import math
import re
import struct
from collections.abc import KeysView, Mapping
from datetime import date, datetime
from types import MappingProxyType
from typing import Callable, TypeVar

from lijense.common.config import Config
from lijense.common.exceptions import FormatError

T = TypeVar("T")

_INTEGER = re.compile(r"[+-]?[0-9]+")


def _integer_parser(bits: int) -> Callable[[str], int]:
    low, high = -(2 ** (bits - 1)), 2 ** (bits - 1) - 1

    def parse(value: str) -> int:
        if not _INTEGER.fullmatch(value):
            msg = f"Not a decimal integer: {value!r}"
            raise ValueError(msg)
        number = int(value)
        if not low <= number <= high:
            msg = f"Value {number} is out of range for a {bits}-bit integer"
            raise ValueError(msg)
        return number

    return parse


def _parse_single(value: str) -> float:
    number = float(value)
    try:
        return struct.unpack("f", struct.pack("f", number))[0]
    except OverflowError:
        return math.copysign(math.inf, number)


def _parse_boolean(value: str) -> bool:
    lowered = value.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    msg = f"Not a boolean: {value!r}"
    raise ValueError(msg)


def _parse_date(value: str) -> date:
    return datetime.strptime(value, Config.DATE_FORMAT).date()


_parse_byte = _integer_parser(8)
_parse_short = _integer_parser(16)
_parse_int = _integer_parser(32)
_parse_long = _integer_parser(64)


class UnmodifiableLicense:
    """Frozen view on the entries of a loaded license.

    The entries are copied on construction, later changes to the mapping
    handed in are not visible. Typed getters return the default for absent
    or empty values and raise FormatError for values they cannot parse.
    """

    def __init__(self, entries: Mapping[str, str]) -> None:
        self._entries: Mapping[str, str] = MappingProxyType(dict(entries))

    def get_value(self, key: str) -> str | None:
        return self._entries.get(key)

    def is_feature_active(self, key: str) -> bool:
        """Return True only if the value is ``true``. Never raises."""
        value = self.get_value(key)
        return bool(value) and value.lower() == "true"

    def _get_as(self, key: str, default: T, parse: Callable[[str], T], kind: str) -> T:
        value = self.get_value(key)
        if not value:
            return default
        try:
            return parse(value)
        except ValueError as err:
            msg = f"The value of '{key}' is not a valid {kind}: {value!r}"
            raise FormatError(msg) from err

    def get_value_as_byte(self, key: str, default: int) -> int:
        return self._get_as(key, default, _parse_byte, "byte")

    def get_value_as_short(self, key: str, default: int) -> int:
        return self._get_as(key, default, _parse_short, "short")

    def get_value_as_int(self, key: str, default: int) -> int:
        return self._get_as(key, default, _parse_int, "int")

    def get_value_as_long(self, key: str, default: int) -> int:
        return self._get_as(key, default, _parse_long, "long")

    def get_value_as_float(self, key: str, default: float) -> float:
        """Parse the value with single precision."""
        return self._get_as(key, default, _parse_single, "float")

    def get_value_as_double(self, key: str, default: float) -> float:
        return self._get_as(key, default, float, "double")

    def get_value_as_char(self, key: str, default: str) -> str:
        """Return the first character of the value."""
        return self._get_as(key, default, lambda value: value[0], "char")

    def get_value_as_boolean(self, key: str, default: bool) -> bool:  # noqa: FBT001
        return self._get_as(key, default, _parse_boolean, "boolean")

    def get_value_as_date(self, key: str, default: date | None) -> date | None:
        return self._get_as(key, default, _parse_date, "date")

    @property
    def expiration_date(self) -> date | None:
        return self.get_value_as_date(Config.LICENSE_KEY_EXPIRATION_DATE, None)

    def is_expired(self, today: date | None = None) -> bool:
        """Check whether the expiration date lies before today.

        Both sides are compared as dates, so the license is still valid on
        the day it expires. A license without expiration date never expires.
        """
        expiration = self.expiration_date
        if expiration is None:
            return False
        if today is None:
            today = date.today()
        elif isinstance(today, datetime):
            today = today.date()
        return today > expiration

    def keys(self) -> KeysView[str]:
        return self._entries.keys()

    def to_dict(self) -> dict[str, str]:
        return dict(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"UnmodifiableLicense({dict(self._entries)!r})"
