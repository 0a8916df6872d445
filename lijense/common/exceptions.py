"""
Custom exceptions for the licensing library.
"""

from __future__ import annotations


class LijenseError(Exception):
    """Base class for all library errors."""


class KeyManagementError(LijenseError):
    """Exception for key generation, encoding, loading and fingerprinting failures."""


class LicenseError(LijenseError):
    """Exception for license packaging and loading failures."""


class LicenseValidationError(LicenseError):
    """Exception for licenses that were read but must not be trusted."""


class FingerprintMismatchError(LicenseValidationError):
    """The public key does not match the pinned fingerprint."""

    def __init__(self) -> None:
        super().__init__(
            "The actual fingerprint of the public key does not match "
            "the expected fingerprint."
        )


class InvalidSignatureError(LicenseValidationError):
    """The signature does not match the license content."""

    def __init__(self) -> None:
        super().__init__("The license is not valid")


class FeatureNotActiveError(LicenseValidationError):
    """Exception for gated calls whose license check failed."""


class FormatError(LijenseError, ValueError):
    """Exception for values that cannot be parsed into the requested type."""
