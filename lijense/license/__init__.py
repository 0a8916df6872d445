"""
License containers and the signed license file format.
"""

from .modifiable import ModifiableLicense
from .packager import LicensePackager
from .unmodifiable import UnmodifiableLicense

__all__ = ["LicensePackager", "ModifiableLicense", "UnmodifiableLicense"]
