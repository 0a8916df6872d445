"""
Command-line interface for issuing and inspecting liJense license files.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime

import click

from lijense.common import setup_logger
from lijense.common.config import Config
from lijense.common.exceptions import LijenseError
from lijense.key import KeyManager
from lijense.license import LicensePackager, ModifiableLicense


def _parse_entry(entry: str) -> tuple[str, str]:
    key, sep, value = entry.partition("=")
    if not sep or not key:
        msg = f"Entries must look like KEY=VALUE, got {entry!r}"
        raise click.BadParameter(msg, param_hint="--entry")
    return key, value


@click.group()
def cli() -> None:
    """liJense license issuing tools"""
    config = Config()
    setup_logger(logging.getLogger("lijense"), config.LOG_LEVEL)


@cli.command()
@click.option(
    "--keys-dir",
    default=None,
    help="Directory to save keys (default: from LIJENSE_KEYS_DIR env or ./keys)",
)
@click.option(
    "--key-size",
    default=None,
    type=int,
    help="RSA modulus size in bits (default: 4096)",
)
def keygen(keys_dir: str | None, key_size: int | None) -> None:
    """Generate an RSA key pair for signing licenses"""
    if keys_dir:
        os.environ["LIJENSE_KEYS_DIR"] = keys_dir
    config = Config()

    overrides = {"key_size": key_size} if key_size else {}
    key_manager = KeyManager(config, **overrides)
    try:
        key_pair = key_manager.generate_key_pair()
        config.KEYS_DIR.mkdir(parents=True, exist_ok=True)
        key_manager.save_key_to_file(key_pair.private_key, config.PRIVATE_KEY_PATH)
        key_manager.save_key_to_file(key_pair.public_key, config.PUBLIC_KEY_PATH)
        fingerprint = key_manager.fingerprint(key_pair.public_key)
    except (LijenseError, OSError) as err:
        raise click.ClickException(str(err)) from err

    click.echo("Keys generated and saved")
    click.echo(f"Fingerprint: {fingerprint.hex()}")


@cli.command()
@click.option(
    "--public-key",
    required=True,
    type=click.Path(dir_okay=False),
    help="Public key file",
)
def fingerprint(public_key: str) -> None:
    """Print the SHA-512 fingerprint of a public key"""
    key_manager = KeyManager()
    try:
        key = key_manager.load_public_key_from_file(public_key)
        click.echo(key_manager.fingerprint(key).hex())
    except LijenseError as err:
        raise click.ClickException(str(err)) from err


@cli.command()
@click.option(
    "--private-key",
    required=True,
    type=click.Path(dir_okay=False),
    help="Private key file used for signing",
)
@click.option(
    "--output",
    required=True,
    type=click.Path(dir_okay=False),
    help="License file to write",
)
@click.option(
    "--entry",
    "entries",
    multiple=True,
    help="License entry as KEY=VALUE (repeatable)",
)
@click.option(
    "--expires",
    default=None,
    type=click.DateTime(formats=["%Y-%m-%d"]),
    help="Expiration date as YYYY-MM-DD",
)
def issue(
    private_key: str,
    output: str,
    entries: tuple[str, ...],
    expires: datetime | None,
) -> None:
    """Create and sign a license file"""
    parsed = [_parse_entry(entry) for entry in entries]

    key_manager = KeyManager()
    try:
        lic = ModifiableLicense()
        for key_name, value in parsed:
            lic.set_value(key_name, value)
        lic.set_expiration_date(expires)
        key = key_manager.load_private_key_from_file(private_key)
        LicensePackager(key_manager=key_manager).save_license_file(lic, key, output)
    except LijenseError as err:
        raise click.ClickException(str(err)) from err
    click.echo(f"License written to {output}")


@cli.command()
@click.option(
    "--license",
    "license_file",
    required=True,
    type=click.Path(dir_okay=False),
    help="License file to read",
)
@click.option(
    "--public-key",
    default=None,
    type=click.Path(dir_okay=False),
    help="Public key file used for verification",
)
@click.option(
    "--fingerprint",
    "expected_fingerprint",
    default=None,
    help="Expected public key fingerprint as hex",
)
@click.option(
    "--skip-validation",
    is_flag=True,
    help="Show the content without checking the signature (diagnostics only)",
)
def inspect(
    license_file: str,
    public_key: str | None,
    expected_fingerprint: str | None,
    skip_validation: bool,  # noqa: FBT001
) -> None:
    """Verify a license file and print its entries"""
    key_manager = KeyManager()
    packager = LicensePackager(key_manager=key_manager)
    try:
        if skip_validation:
            click.echo("WARNING: signature not checked", err=True)
            lic = packager.load_license_file_without_validation(license_file)
        else:
            if not public_key:
                msg = "--public-key is required unless --skip-validation is given"
                raise click.UsageError(msg)
            pinned = bytes.fromhex(expected_fingerprint) if expected_fingerprint else None
            key = key_manager.load_public_key_from_file(public_key)
            lic = packager.load_license_file(license_file, key, pinned)
        expired = lic.is_expired()
    except LijenseError as err:
        raise click.ClickException(str(err)) from err
    except ValueError as err:
        raise click.BadParameter(str(err), param_hint="--fingerprint") from err

    for key_name in sorted(lic.keys()):
        click.echo(f"{key_name}={lic.get_value(key_name)}")
    click.echo(f"Expired: {'yes' if expired else 'no'}")


if __name__ == "__main__":
    cli()
