"""Text transport for binary license data and keys.
"""

from __future__ import annotations

import base64
import binascii
from typing import BinaryIO

from lijense.common.exceptions import FormatError

BUFFER_SIZE = 1024


class Codec:
    """Utility class for Base64 transport encoding."""

    @staticmethod
    def to_text(data: bytes) -> str:
        """Encode binary data as a Base64 string."""
        return Codec.to_binary_text(data).decode("ascii")

    @staticmethod
    def from_text(text: str) -> bytes:
        """Decode a Base64 string into binary data."""
        try:
            return Codec.from_binary_text(text.encode("ascii"))
        except UnicodeEncodeError as err:
            msg = "The text contains non-ASCII characters"
            raise FormatError(msg) from err

    @staticmethod
    def to_binary_text(data: bytes) -> bytes:
        """Encode binary data as Base64, keeping the ASCII text as bytes."""
        return base64.b64encode(data)

    @staticmethod
    def from_binary_text(data: bytes) -> bytes:
        """Decode Base64 given as ASCII bytes."""
        try:
            return base64.b64decode(data, validate=True)
        except binascii.Error as err:
            msg = "The text is not valid Base64"
            raise FormatError(msg) from err

    @staticmethod
    def read_all(stream: BinaryIO) -> bytes:
        """Read all bytes from the stream. The stream is not closed."""
        chunks = []
        while True:
            chunk = stream.read(BUFFER_SIZE)
            if not chunk:
                break
            chunks.append(chunk)
        return b"".join(chunks)
