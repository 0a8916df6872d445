"""
RSA key lifecycle: generation, DER encoding, persistence and fingerprints.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
from pathlib import Path
from typing import Any, BinaryIO, Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey

from lijense.common import Codec, Configurable
from lijense.common.config import Config
from lijense.common.exceptions import FormatError, KeyManagementError
from lijense.common.models import KeyPair

logger = logging.getLogger(__name__)

RSAKey = Union[RSAPrivateKey, RSAPublicKey]

_DECODE_ERRORS = (ValueError, TypeError, UnsupportedAlgorithm)


class KeyManager(Configurable):
    """Creates, encodes, stores and fingerprints RSA keys."""

    def __init__(self, config: Config | None = None, **overrides: Any) -> None:
        self.config = config or Config()
        self.key_size: int
        self.public_exponent: int
        self.apply_overrides(overrides, self.config, ["key_size", "public_exponent"])

    def generate_key_pair(self) -> KeyPair:
        """Generate a new RSA key pair from the operating system's CSPRNG."""
        logger.debug("Generating %s-bit RSA key pair", self.key_size)
        try:
            private_key = rsa.generate_private_key(
                public_exponent=self.public_exponent,
                key_size=self.key_size,
            )
        except (ValueError, UnsupportedAlgorithm) as err:
            msg = "Could not create a new key pair"
            raise KeyManagementError(msg) from err
        return KeyPair(private_key=private_key, public_key=private_key.public_key())

    @staticmethod
    def encode_key(key: RSAKey) -> bytes:
        """Encode a private key as PKCS#8 DER or a public key as X.509 DER."""
        try:
            if isinstance(key, RSAPrivateKey):
                return key.private_bytes(
                    encoding=serialization.Encoding.DER,
                    format=serialization.PrivateFormat.PKCS8,
                    encryption_algorithm=serialization.NoEncryption(),
                )
            if isinstance(key, RSAPublicKey):
                return key.public_bytes(
                    encoding=serialization.Encoding.DER,
                    format=serialization.PublicFormat.SubjectPublicKeyInfo,
                )
            msg = f"Unsupported key type: {type(key).__name__}"
            raise TypeError(msg)
        except (TypeError, ValueError, UnsupportedAlgorithm) as err:
            msg = "Could not encode the key"
            raise KeyManagementError(msg) from err

    @staticmethod
    def decode_private_key(data: bytes) -> RSAPrivateKey:
        """Load an RSA private key from PKCS#8 DER bytes."""
        if data is None:
            msg = "The key data must not be None."
            raise ValueError(msg)
        try:
            key = serialization.load_der_private_key(data, password=None)
            if not isinstance(key, RSAPrivateKey):
                msg = f"Expected an RSA private key, got {type(key).__name__}"
                raise TypeError(msg)
        except _DECODE_ERRORS as err:
            msg = "Could not load the key"
            raise KeyManagementError(msg) from err
        return key

    @staticmethod
    def decode_public_key(data: bytes) -> RSAPublicKey:
        """Load an RSA public key from X.509 SubjectPublicKeyInfo DER bytes."""
        if data is None:
            msg = "The key data must not be None."
            raise ValueError(msg)
        try:
            key = serialization.load_der_public_key(data)
            if not isinstance(key, RSAPublicKey):
                msg = f"Expected an RSA public key, got {type(key).__name__}"
                raise TypeError(msg)
        except _DECODE_ERRORS as err:
            msg = "Could not load the key"
            raise KeyManagementError(msg) from err
        return key

    def fingerprint(self, public_key: RSAPublicKey) -> bytes:
        """Calculate the SHA-512 fingerprint of the encoded public key."""
        if public_key is None:
            msg = "The key must not be None."
            raise ValueError(msg)
        try:
            encoded = self.encode_key(public_key)
        except KeyManagementError as err:
            msg = "Could not calculate the fingerprint of the public key"
            raise KeyManagementError(msg) from err.__cause__
        return hashlib.sha512(encoded).digest()

    def fingerprint_of_encoded(self, data: bytes) -> bytes:
        """Calculate the fingerprint of a public key given in its DER encoding."""
        return self.fingerprint(self.decode_public_key(data))

    def verify_fingerprint(self, public_key: RSAPublicKey, expected: bytes) -> bool:
        """Check the public key against a fingerprint known out-of-band."""
        if expected is None:
            msg = "The fingerprint must not be None."
            raise ValueError(msg)
        actual = self.fingerprint(public_key)
        valid = hmac.compare_digest(actual, bytes(expected))
        if not valid:
            logger.warning("Public key fingerprint %s is not the expected one", actual.hex())
        return valid

    def save_key_to_file(self, key: RSAKey, path: Path | str) -> None:
        """Encode the key, wrap it in Base64 and write it to the file."""
        encoded = Codec.to_binary_text(self.encode_key(key))
        try:
            Path(path).write_bytes(encoded)
        except OSError as err:
            msg = "Could not save the key"
            raise KeyManagementError(msg) from err
        logger.info("Saved %s to %s", type(key).__name__, path)

    def load_private_key_from_file(self, path: Path | str) -> RSAPrivateKey:
        return self.decode_private_key(self._read_key_file(path))

    def load_public_key_from_file(self, path: Path | str) -> RSAPublicKey:
        return self.decode_public_key(self._read_key_file(path))

    def load_private_key_from_stream(self, stream: BinaryIO) -> RSAPrivateKey:
        return self.decode_private_key(self._read_key_stream(stream))

    def load_public_key_from_stream(self, stream: BinaryIO) -> RSAPublicKey:
        return self.decode_public_key(self._read_key_stream(stream))

    def _read_key_file(self, path: Path | str) -> bytes:
        try:
            with Path(path).open("rb") as f:
                return self._read_key_stream(f)
        except OSError as err:
            msg = "Could not load the key"
            raise KeyManagementError(msg) from err

    @staticmethod
    def _read_key_stream(stream: BinaryIO) -> bytes:
        if stream is None:
            msg = "The stream must not be None."
            raise ValueError(msg)
        try:
            return Codec.from_binary_text(Codec.read_all(stream).strip())
        except (OSError, FormatError) as err:
            msg = "Could not load the key"
            raise KeyManagementError(msg) from err
