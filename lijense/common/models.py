"""
Pydantic models for keys and signed license archives.
"""

from __future__ import annotations

from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey
from pydantic import BaseModel, ConfigDict


class KeyPair(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    private_key: RSAPrivateKey
    public_key: RSAPublicKey


class SignedLicenseArchive(BaseModel):
    """Serialized license content together with its detached signature."""

    model_config = ConfigDict(frozen=True)

    content: bytes
    signature: bytes
