import pytest

from lijense.common.models import KeyPair
from lijense.key import KeyManager
from lijense.license import LicensePackager


@pytest.fixture(scope="session")
def key_manager() -> KeyManager:
    return KeyManager()


@pytest.fixture(scope="session")
def key_pair(key_manager: KeyManager) -> KeyPair:
    """Default 4096-bit key pair, generated once because it is slow."""
    return key_manager.generate_key_pair()


@pytest.fixture(scope="session")
def other_key_pair() -> KeyPair:
    """Unrelated key pair for wrong-key scenarios."""
    return KeyManager(key_size=2048).generate_key_pair()


@pytest.fixture
def packager(key_manager: KeyManager) -> LicensePackager:
    return LicensePackager(key_manager=key_manager)
