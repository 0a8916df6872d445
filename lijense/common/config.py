"""
Configuration settings for the licensing library.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path


class Config:
    """Central configuration class for all library settings."""

    # Key settings
    KEY_ALGORITHM: str = "RSA"
    KEY_SIZE: int = 4096
    PUBLIC_EXPONENT: int = 65537
    FINGERPRINT_ALGORITHM: str = "SHA-512"

    # License container settings
    SIGNATURE_ALGORITHM: str = "SHA512withRSA"
    LICENSE_ENCODING: str = "UTF-8"
    LICENSE_COMMENT: str = "liJense"
    LICENSE_ENTRY_NAME: str = "license"
    SIGNATURE_ENTRY_NAME: str = "signature"

    # Well-known license keys
    DATE_FORMAT: str = "%Y-%m-%d"  # yyyy-MM-dd
    LICENSE_KEY_EXPIRATION_DATE: str = "_EXPIRATION_DATE"

    def __init__(self) -> None:
        # Logging
        level_name = os.getenv("LIJENSE_LOG_LEVEL", "INFO").upper()
        self.LOG_LEVEL: int = getattr(logging, level_name, logging.INFO)

        # File paths
        self.KEYS_DIR: Path = Path(os.getenv("LIJENSE_KEYS_DIR", "keys"))
        self.PRIVATE_KEY_PATH: Path = self.KEYS_DIR / "key.private"
        self.PUBLIC_KEY_PATH: Path = self.KEYS_DIR / "key.public"
