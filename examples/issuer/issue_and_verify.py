"""
Issue and verify a license file.

This example generates a key pair, signs a license with a feature flag and
an expiration date, and loads it back with fingerprint pinning.
"""

import logging
import sys
import tempfile
from datetime import date, timedelta
from pathlib import Path

# Add the project root to the path to import lijense
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from lijense import KeyManager, LicenseError, LicensePackager, ModifiableLicense


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    logger = logging.getLogger(__name__)

    key_manager = KeyManager()
    packager = LicensePackager(key_manager=key_manager)

    key_pair = key_manager.generate_key_pair()
    fingerprint = key_manager.fingerprint(key_pair.public_key)
    logger.info("Public key fingerprint: %s", fingerprint.hex())

    lic = ModifiableLicense()
    lic.set_value("customer", "ACME Corp.")
    lic.set_value("myFeature.active", True)
    lic.set_value("maxUsers", 25)
    lic.set_expiration_date(date.today() + timedelta(days=365))

    with tempfile.TemporaryDirectory() as tmp:
        license_file = Path(tmp) / "customer.license"
        packager.save_license_file(lic, key_pair.private_key, license_file)

        try:
            loaded = packager.load_license_file(
                license_file, key_pair.public_key, fingerprint
            )
        except LicenseError:
            logger.exception("License rejected")
            sys.exit(1)

    logger.info("Feature active: %s", loaded.is_feature_active("myFeature.active"))
    logger.info("Max users: %s", loaded.get_value_as_int("maxUsers", 1))
    logger.info("Expires on %s, expired: %s", loaded.expiration_date, loaded.is_expired())


if __name__ == "__main__":
    main()
