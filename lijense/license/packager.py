"""
Signing, packaging and verification of license files.

A license file is the Base64 text of a ZIP archive with two entries: the
canonical XML content and the RSA/SHA-512 signature over exactly those bytes.
"""

from __future__ import annotations

import io
import logging
import zipfile
import zlib
from pathlib import Path
from typing import BinaryIO, Callable

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey

from lijense.common import Codec
from lijense.common.config import Config
from lijense.common.exceptions import (
    FingerprintMismatchError,
    FormatError,
    InvalidSignatureError,
    KeyManagementError,
    LicenseError,
)
from lijense.common.models import SignedLicenseArchive
from lijense.key import KeyManager
from lijense.license.modifiable import ModifiableLicense
from lijense.license.properties import load_properties
from lijense.license.unmodifiable import UnmodifiableLicense

logger = logging.getLogger(__name__)

# Failures that only mean the license could not be read or written
_IO_ERRORS = (
    OSError,
    EOFError,
    ValueError,
    TypeError,
    RuntimeError,
    zipfile.BadZipFile,
    zlib.error,
    UnsupportedAlgorithm,
    KeyManagementError,
)


class LicensePackager:
    """Creates signed license files and loads them back."""

    def __init__(
        self,
        config: Config | None = None,
        key_manager: KeyManager | None = None,
    ) -> None:
        self.config = config or Config()
        self.key_manager = key_manager or KeyManager(self.config)

    # Signature primitives

    @staticmethod
    def sign(content: bytes, private_key: RSAPrivateKey) -> bytes:
        """Sign the content with RSA PKCS#1 v1.5 and SHA-512."""
        if not isinstance(private_key, RSAPrivateKey):
            msg = f"Expected an RSA private key, got {type(private_key).__name__}"
            raise TypeError(msg)
        return private_key.sign(content, padding.PKCS1v15(), hashes.SHA512())

    @staticmethod
    def verify(content: bytes, signature: bytes, public_key: RSAPublicKey) -> bool:
        """Check an RSA/SHA-512 signature over the content."""
        if not isinstance(public_key, RSAPublicKey):
            msg = f"Expected an RSA public key, got {type(public_key).__name__}"
            raise TypeError(msg)
        try:
            public_key.verify(signature, content, padding.PKCS1v15(), hashes.SHA512())
        except InvalidSignature:
            return False
        return True

    # Archive format

    def pack(self, archive: SignedLicenseArchive) -> bytes:
        """Write content and signature into a two-entry ZIP archive."""
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
            zf.writestr(self.config.LICENSE_ENTRY_NAME, archive.content)
            zf.writestr(self.config.SIGNATURE_ENTRY_NAME, archive.signature)
        return buffer.getvalue()

    def unpack(self, data: bytes) -> SignedLicenseArchive:
        """Read content and signature back from the archive bytes."""
        expected = [self.config.LICENSE_ENTRY_NAME, self.config.SIGNATURE_ENTRY_NAME]
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            names = [info.filename for info in zf.infolist()]
            if names != expected:
                msg = f"Expected archive entries {expected}, found {names}"
                raise FormatError(msg)
            return SignedLicenseArchive(
                content=zf.read(expected[0]),
                signature=zf.read(expected[1]),
            )

    # Creating licenses

    def create_archive(self, lic: ModifiableLicense, private_key: RSAPrivateKey) -> bytes:
        """Serialize, sign and package the license."""
        try:
            content = lic.to_bytes()
            signature = self.sign(content, private_key)
            data = self.pack(SignedLicenseArchive(content=content, signature=signature))
        except _IO_ERRORS as err:
            msg = "Could not create the license"
            raise LicenseError(msg) from err
        logger.debug("Created license archive with %d entries", len(lic))
        return data

    def create_archive_as_text(self, lic: ModifiableLicense, private_key: RSAPrivateKey) -> str:
        return Codec.to_text(self.create_archive(lic, private_key))

    def save_license_file(
        self,
        lic: ModifiableLicense,
        private_key: RSAPrivateKey,
        path: Path | str,
    ) -> None:
        """Create the license and write its text form to the file."""
        text = self.create_archive_as_text(lic, private_key)
        try:
            Path(path).write_bytes(text.encode(self.config.LICENSE_ENCODING))
        except OSError as err:
            msg = "Could not save the license"
            raise LicenseError(msg) from err
        logger.info("Saved license to %s", path)

    # Loading licenses

    def open_archive(
        self,
        data: bytes,
        public_key: RSAPublicKey,
        fingerprint: bytes | None = None,
    ) -> UnmodifiableLicense:
        """Verify and load a license from archive bytes.

        If a fingerprint is given, the public key is checked against it
        before anything else happens.

        Raises:
            FingerprintMismatchError: The public key is not the pinned one
            InvalidSignatureError: The signature does not match the content
            LicenseError: The archive could not be read
        """
        return self._open(lambda: data, public_key, fingerprint, check_validity=True)

    def open_archive_from_text(
        self,
        text: str,
        public_key: RSAPublicKey,
        fingerprint: bytes | None = None,
    ) -> UnmodifiableLicense:
        return self._open(
            lambda: Codec.from_text(text.strip()),
            public_key,
            fingerprint,
            check_validity=True,
        )

    def open_archive_from_stream(
        self,
        stream: BinaryIO,
        public_key: RSAPublicKey,
        fingerprint: bytes | None = None,
    ) -> UnmodifiableLicense:
        """Load a license from a stream holding the text form. The stream is not closed."""
        return self._open(
            lambda: self._read_text_stream(stream),
            public_key,
            fingerprint,
            check_validity=True,
        )

    def load_license_file(
        self,
        path: Path | str,
        public_key: RSAPublicKey,
        fingerprint: bytes | None = None,
    ) -> UnmodifiableLicense:
        return self._open(
            lambda: self._read_text_file(path),
            public_key,
            fingerprint,
            check_validity=True,
        )

    # Loading licenses without validation, for diagnostics only

    def open_archive_without_validation(self, data: bytes) -> UnmodifiableLicense:
        return self._open(lambda: data, None, None, check_validity=False)

    def open_archive_from_text_without_validation(self, text: str) -> UnmodifiableLicense:
        return self._open(
            lambda: Codec.from_text(text.strip()), None, None, check_validity=False
        )

    def open_archive_from_stream_without_validation(
        self, stream: BinaryIO
    ) -> UnmodifiableLicense:
        return self._open(
            lambda: self._read_text_stream(stream), None, None, check_validity=False
        )

    def load_license_file_without_validation(self, path: Path | str) -> UnmodifiableLicense:
        return self._open(
            lambda: self._read_text_file(path), None, None, check_validity=False
        )

    def _open(
        self,
        read_archive: Callable[[], bytes],
        public_key: RSAPublicKey | None,
        fingerprint: bytes | None,
        *,
        check_validity: bool,
    ) -> UnmodifiableLicense:
        if check_validity and public_key is None:
            msg = "The public key must not be None."
            raise ValueError(msg)

        try:
            if check_validity and fingerprint is not None:
                if not self.key_manager.verify_fingerprint(public_key, fingerprint):
                    raise FingerprintMismatchError

            archive = self.unpack(read_archive())

            if check_validity:
                if not self.verify(archive.content, archive.signature, public_key):
                    logger.warning("License signature verification failed")
                    raise InvalidSignatureError
            else:
                logger.warning("Loading license without signature validation")

            entries = load_properties(archive.content)
        except _IO_ERRORS as err:
            msg = "Could not load the license"
            raise LicenseError(msg) from err

        logger.debug("Loaded license with %d entries", len(entries))
        return UnmodifiableLicense(entries)

    def _read_text_file(self, path: Path | str) -> bytes:
        with Path(path).open("rb") as f:
            return self._read_text_stream(f)

    @staticmethod
    def _read_text_stream(stream: BinaryIO) -> bytes:
        return Codec.from_binary_text(Codec.read_all(stream).strip())
