import hashlib
import io
from pathlib import Path
from unittest.mock import Mock

import pytest
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey

from lijense.common import Codec
from lijense.common.exceptions import FormatError, KeyManagementError
from lijense.common.models import KeyPair
from lijense.key import KeyManager


def test_key_generation(key_pair: KeyPair) -> None:
    assert isinstance(key_pair.private_key, RSAPrivateKey)
    assert isinstance(key_pair.public_key, RSAPublicKey)
    assert key_pair.private_key.key_size == 4096  # noqa: PLR2004
    assert key_pair.public_key.public_numbers().e == 65537  # noqa: PLR2004
    assert (
        key_pair.private_key.public_key().public_numbers()
        == key_pair.public_key.public_numbers()
    )


def test_key_size_override(other_key_pair: KeyPair) -> None:
    assert KeyManager(key_size=2048).key_size == 2048  # noqa: PLR2004
    assert other_key_pair.private_key.key_size == 2048  # noqa: PLR2004


def test_unknown_override() -> None:
    with pytest.raises(TypeError):
        KeyManager(curve="ed25519")


def test_key_generation_with_invalid_parameters() -> None:
    key_manager = KeyManager(public_exponent=4)

    with pytest.raises(KeyManagementError, match="^Could not create a new key pair$") as excinfo:
        key_manager.generate_key_pair()
    assert isinstance(excinfo.value.__cause__, ValueError)


def test_encode_private_key_is_pkcs8_der(key_manager: KeyManager, key_pair: KeyPair) -> None:
    encoded = key_manager.encode_key(key_pair.private_key)

    assert encoded == key_pair.private_key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


def test_encode_public_key_is_x509_der(key_manager: KeyManager, key_pair: KeyPair) -> None:
    encoded = key_manager.encode_key(key_pair.public_key)

    assert encoded == key_pair.public_key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )


def test_encode_unsupported_key(key_manager: KeyManager) -> None:
    with pytest.raises(KeyManagementError, match="^Could not encode the key$") as excinfo:
        key_manager.encode_key(Ed25519PrivateKey.generate())  # type: ignore[arg-type]
    assert isinstance(excinfo.value.__cause__, TypeError)


def test_decode_round_trip(key_manager: KeyManager, key_pair: KeyPair) -> None:
    private_der = key_manager.encode_key(key_pair.private_key)
    public_der = key_manager.encode_key(key_pair.public_key)

    assert key_manager.encode_key(key_manager.decode_private_key(private_der)) == private_der
    assert key_manager.encode_key(key_manager.decode_public_key(public_der)) == public_der


def test_decode_private_key_with_invalid_data(key_manager: KeyManager) -> None:
    with pytest.raises(KeyManagementError, match="^Could not load the key$") as excinfo:
        key_manager.decode_private_key(b"")
    assert isinstance(excinfo.value.__cause__, ValueError)


def test_decode_public_key_with_invalid_data(key_manager: KeyManager) -> None:
    with pytest.raises(KeyManagementError, match="^Could not load the key$"):
        key_manager.decode_public_key(b"\x30\x03\x02\x01\x00")


def test_decode_does_not_fall_back_to_the_other_kind(
    key_manager: KeyManager, key_pair: KeyPair
) -> None:
    with pytest.raises(KeyManagementError):
        key_manager.decode_private_key(key_manager.encode_key(key_pair.public_key))

    with pytest.raises(KeyManagementError):
        key_manager.decode_public_key(key_manager.encode_key(key_pair.private_key))


def test_decode_rejects_non_rsa_keys(key_manager: KeyManager) -> None:
    ed_key = Ed25519PrivateKey.generate()
    ed_public_der = ed_key.public_key().public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )

    with pytest.raises(KeyManagementError, match="^Could not load the key$") as excinfo:
        key_manager.decode_public_key(ed_public_der)
    assert isinstance(excinfo.value.__cause__, TypeError)


def test_calculate_fingerprint(key_manager: KeyManager, key_pair: KeyPair) -> None:
    fingerprint = key_manager.fingerprint(key_pair.public_key)

    assert len(fingerprint) == 64  # noqa: PLR2004
    assert fingerprint == hashlib.sha512(key_manager.encode_key(key_pair.public_key)).digest()


def test_fingerprint_is_deterministic(key_manager: KeyManager, key_pair: KeyPair) -> None:
    encoded = key_manager.encode_key(key_pair.public_key)
    first = key_manager.decode_public_key(encoded)
    second = key_manager.decode_public_key(encoded)

    assert key_manager.fingerprint(key_pair.public_key) == key_manager.fingerprint(
        key_pair.public_key
    )
    assert key_manager.fingerprint(first) == key_manager.fingerprint(second)
    assert key_manager.fingerprint_of_encoded(encoded) == key_manager.fingerprint(
        key_pair.public_key
    )


def test_fingerprints_of_distinct_keys_differ(
    key_manager: KeyManager, key_pair: KeyPair, other_key_pair: KeyPair
) -> None:
    assert key_manager.fingerprint(key_pair.public_key) != key_manager.fingerprint(
        other_key_pair.public_key
    )


def test_calculate_fingerprint_with_error(key_manager: KeyManager) -> None:
    public_key = Mock(spec=RSAPublicKey)
    public_key.public_bytes.side_effect = UnsupportedAlgorithm("no such algorithm")

    with pytest.raises(
        KeyManagementError, match="^Could not calculate the fingerprint of the public key$"
    ) as excinfo:
        key_manager.fingerprint(public_key)
    assert isinstance(excinfo.value.__cause__, UnsupportedAlgorithm)


def test_verify_fingerprint_positive(key_manager: KeyManager, key_pair: KeyPair) -> None:
    expected = key_manager.fingerprint(key_pair.public_key)
    assert key_manager.verify_fingerprint(key_pair.public_key, expected) is True


def test_verify_fingerprint_negative(key_manager: KeyManager, key_pair: KeyPair) -> None:
    fingerprint = bytearray(key_manager.fingerprint(key_pair.public_key))
    fingerprint[0] ^= 0x01

    assert key_manager.verify_fingerprint(key_pair.public_key, bytes(fingerprint)) is False


def test_verify_fingerprint_length_mismatch(key_manager: KeyManager, key_pair: KeyPair) -> None:
    expected = key_manager.fingerprint(key_pair.public_key)

    assert key_manager.verify_fingerprint(key_pair.public_key, expected[:32]) is False
    assert key_manager.verify_fingerprint(key_pair.public_key, b"") is False


def test_save_and_load_private_key(
    key_manager: KeyManager, key_pair: KeyPair, tmp_path: Path
) -> None:
    target = tmp_path / "key.private"
    key_manager.save_key_to_file(key_pair.private_key, target)

    loaded = key_manager.load_private_key_from_file(target)
    assert key_manager.encode_key(loaded) == key_manager.encode_key(key_pair.private_key)


def test_save_and_load_public_key(
    key_manager: KeyManager, key_pair: KeyPair, tmp_path: Path
) -> None:
    target = tmp_path / "key.public"
    key_manager.save_key_to_file(key_pair.public_key, target)

    # The file holds the Base64 text of the DER encoding
    assert target.read_bytes() == Codec.to_binary_text(key_manager.encode_key(key_pair.public_key))

    loaded = key_manager.load_public_key_from_file(str(target))
    assert key_manager.encode_key(loaded) == key_manager.encode_key(key_pair.public_key)


def test_load_key_ignores_surrounding_whitespace(
    key_manager: KeyManager, key_pair: KeyPair, tmp_path: Path
) -> None:
    target = tmp_path / "key.public"
    text = Codec.to_text(key_manager.encode_key(key_pair.public_key))
    target.write_text(f"{text}\n")

    loaded = key_manager.load_public_key_from_file(target)
    assert key_manager.fingerprint(loaded) == key_manager.fingerprint(key_pair.public_key)


def test_load_keys_from_stream(key_manager: KeyManager, key_pair: KeyPair) -> None:
    private_text = Codec.to_binary_text(key_manager.encode_key(key_pair.private_key))
    public_text = Codec.to_binary_text(key_manager.encode_key(key_pair.public_key))

    private_key = key_manager.load_private_key_from_stream(io.BytesIO(private_text))
    public_key = key_manager.load_public_key_from_stream(io.BytesIO(public_text))

    assert isinstance(private_key, RSAPrivateKey)
    assert isinstance(public_key, RSAPublicKey)


def test_load_key_from_empty_stream(key_manager: KeyManager) -> None:
    with pytest.raises(KeyManagementError, match="^Could not load the key$") as excinfo:
        key_manager.load_private_key_from_stream(io.BytesIO(b""))
    assert isinstance(excinfo.value.__cause__, ValueError)

    with pytest.raises(KeyManagementError, match="^Could not load the key$"):
        key_manager.load_public_key_from_stream(io.BytesIO(b""))


def test_load_key_from_stream_with_invalid_base64(key_manager: KeyManager) -> None:
    with pytest.raises(KeyManagementError, match="^Could not load the key$") as excinfo:
        key_manager.load_public_key_from_stream(io.BytesIO(b"not base64!"))
    assert isinstance(excinfo.value.__cause__, FormatError)


@pytest.mark.parametrize("method", ["load_private_key_from_stream", "load_public_key_from_stream"])
def test_load_key_from_failing_stream(key_manager: KeyManager, method: str) -> None:
    stream = Mock()
    stream.read.side_effect = OSError("read failed")

    with pytest.raises(KeyManagementError, match="^Could not load the key$") as excinfo:
        getattr(key_manager, method)(stream)
    assert isinstance(excinfo.value.__cause__, OSError)


@pytest.mark.parametrize("method", ["load_private_key_from_file", "load_public_key_from_file"])
def test_load_key_from_non_existing_file(
    key_manager: KeyManager, tmp_path: Path, method: str
) -> None:
    with pytest.raises(KeyManagementError, match="^Could not load the key$") as excinfo:
        getattr(key_manager, method)(tmp_path / "non.existing.file")
    assert isinstance(excinfo.value.__cause__, FileNotFoundError)


def test_save_key_with_invalid_file(
    key_manager: KeyManager, key_pair: KeyPair, tmp_path: Path
) -> None:
    with pytest.raises(KeyManagementError, match="^Could not save the key$") as excinfo:
        key_manager.save_key_to_file(key_pair.public_key, tmp_path)
    assert isinstance(excinfo.value.__cause__, OSError)


def test_none_arguments_are_rejected(key_manager: KeyManager, key_pair: KeyPair) -> None:
    with pytest.raises(ValueError, match="must not be None"):
        key_manager.fingerprint(None)  # type: ignore[arg-type]

    with pytest.raises(ValueError, match="must not be None"):
        key_manager.verify_fingerprint(key_pair.public_key, None)  # type: ignore[arg-type]

    with pytest.raises(ValueError, match="must not be None"):
        key_manager.decode_public_key(None)  # type: ignore[arg-type]
