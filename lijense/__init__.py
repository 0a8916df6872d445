# liJense signed license files

from lijense.common.decorators import requires_feature, requires_valid_license
from lijense.common.exceptions import (
    FingerprintMismatchError,
    FormatError,
    InvalidSignatureError,
    KeyManagementError,
    LicenseError,
    LicenseValidationError,
)
from lijense.common.models import KeyPair
from lijense.key import KeyManager
from lijense.license import LicensePackager, ModifiableLicense, UnmodifiableLicense

__all__ = [
    "FingerprintMismatchError",
    "FormatError",
    "InvalidSignatureError",
    "KeyManagementError",
    "KeyManager",
    "KeyPair",
    "LicenseError",
    "LicensePackager",
    "LicenseValidationError",
    "ModifiableLicense",
    "UnmodifiableLicense",
    "requires_feature",
    "requires_valid_license",
]
