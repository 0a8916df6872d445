"""
Gate application functions on license features.
"""

import logging
import sys
from pathlib import Path

# Add the project root to the path to import lijense
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from lijense import (
    LicenseValidationError,
    UnmodifiableLicense,
    requires_feature,
    requires_valid_license,
)


class ReportService:
    def __init__(self, lic: UnmodifiableLicense) -> None:
        self.license = lic

    @requires_valid_license("license")
    def summary(self) -> str:
        return "summary report"

    @requires_feature("license", "reports.export")
    def export(self) -> str:
        return "exported report"


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    logger = logging.getLogger(__name__)

    # Normally loaded with LicensePackager.load_license_file
    lic = UnmodifiableLicense({"_EXPIRATION_DATE": "2099-12-31"})
    service = ReportService(lic)

    logger.info(service.summary())
    try:
        service.export()
    except LicenseValidationError as err:
        logger.info("Export refused: %s", err)


if __name__ == "__main__":
    main()
