"""License decorators for function protection.
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import TYPE_CHECKING, Any, Union

from lijense.common.exceptions import FeatureNotActiveError
from lijense.common.interfaces import ILicenseReader

if TYPE_CHECKING:
    from collections.abc import Callable

    LicenseSource = Union[ILicenseReader, Callable[[], ILicenseReader], str]

logger = logging.getLogger(__name__)


def _resolve_license(license_source: LicenseSource, args: tuple) -> ILicenseReader:
    """Get the license from an instance, a factory, or an attribute of self."""
    if isinstance(license_source, str):
        if not args:
            msg = f"Cannot get license attribute '{license_source}' without self"
            raise ValueError(msg)
        return getattr(args[0], license_source)
    if isinstance(license_source, ILicenseReader):
        return license_source
    return license_source()


def _license_gate(
    check: Callable[[ILicenseReader], bool],
    license_source: LicenseSource,
    error_message: str,
    raise_exception: bool,  # noqa: FBT001
) -> Callable:
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            lic = _resolve_license(license_source, args)
            if not check(lic):
                if raise_exception:
                    raise FeatureNotActiveError(error_message)
                logger.warning("License check failed: %s", error_message)
                return None
            return func(*args, **kwargs)

        return wrapper

    return decorator


def requires_feature(
    license_source: LicenseSource,
    feature: str,
    error_message: str | None = None,
    *,
    raise_exception: bool = True,
) -> Callable:
    """Decorator that runs the function only when a feature flag is active.

    Args:
        license_source: License instance, callable that returns one, or the
            name of the attribute holding it on self
        feature: License key of the feature flag
        error_message: Message to use when the feature is not active
        raise_exception: Whether to raise exception or return None

    Returns:
        Decorated function that only executes when the feature is active
        and the license has not expired
    """
    message = error_message or f"Feature '{feature}' is not active"
    return _license_gate(
        lambda lic: lic.is_feature_active(feature) and not lic.is_expired(),
        license_source,
        message,
        raise_exception,
    )


def requires_valid_license(
    license_source: LicenseSource,
    error_message: str = "License has expired",
    *,
    raise_exception: bool = True,
) -> Callable:
    """Decorator that runs the function only while the license has not expired.

    Args:
        license_source: License instance, callable that returns one, or the
            name of the attribute holding it on self
        error_message: Message to use when the license has expired
        raise_exception: Whether to raise exception or return None

    Returns:
        Decorated function that only executes before the expiration date
    """
    return _license_gate(
        lambda lic: not lic.is_expired(),
        license_source,
        error_message,
        raise_exception,
    )
