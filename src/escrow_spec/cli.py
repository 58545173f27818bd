"""Command-line helpers for escrow clients.

Lets a depositor compute commitments and the custody address of an escrow
before the creation call is made.
"""

from __future__ import annotations

import logging
from typing import Optional

import click

from .config import HASH_SIZE, ToolConfig
from .crypto.hash_algorithms import double_hash, hash_secret
from .encoding import address_from_hex, checksum, predict_escrow_address

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )


def _commitment(value: str) -> bytes:
    """A 0x-prefixed 32-byte hex value is taken as is; anything else is a secret."""
    if value.startswith("0x") and len(value) == 2 + 2 * HASH_SIZE:
        return bytes.fromhex(value[2:])
    return double_hash(value)


def _address_option(ctx: click.Context, param: click.Parameter, value: Optional[str]) -> Optional[bytes]:
    if value is None:
        return None
    try:
        return address_from_hex(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc


@click.group()
@click.option("--verbose", is_flag=True, help="Enable verbose output")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """Escrow client utilities."""
    config = ToolConfig.from_env()
    if verbose:
        config.verbose = True
    _configure_logging(config.verbose)
    ctx.obj = config


@main.command("hash-secret")
@click.argument("secret")
def hash_secret_cmd(secret: str) -> None:
    """Print the value to reveal for SECRET."""
    click.echo("0x" + hash_secret(secret).hex())


@main.command("double-hash")
@click.argument("secret")
def double_hash_cmd(secret: str) -> None:
    """Print the commitment to register for SECRET."""
    click.echo("0x" + double_hash(secret).hex())


@main.command("predict-address")
@click.option("--registry", required=True, callback=_address_option, help="Registry address")
@click.option("--salt", required=True, help="0x-prefixed 32-byte salt, or text to hash")
@click.option("--id", "registry_id", required=True, type=int, help="Registry id the escrow will get")
@click.option("--token", required=True, callback=_address_option, help="Token address")
@click.option("--amount", required=True, type=int, help="Escrowed amount")
@click.option("--seller", required=True, callback=_address_option, help="Seller address")
@click.option("--buyer", required=True, callback=_address_option, help="Buyer address")
@click.option(
    "--forwarder",
    default=None,
    callback=_address_option,
    help="Trusted forwarder (default: ESCROW_TRUSTED_FORWARDER)",
)
@click.option("--seller-secret", multiple=True, required=True, help="Seller secret or commitment (x2)")
@click.option("--buyer-secret", multiple=True, required=True, help="Buyer secret or commitment (x2)")
@click.option(
    "--arbitrator-secret", multiple=True, required=True, help="Arbitrator secret or commitment (x2)"
)
@click.option("--init-code", default=None, help="Escrow creation bytecode as hex (default: ESCROW_INIT_CODE)")
@click.pass_obj
def predict_address_cmd(
    config: ToolConfig,
    registry: bytes,
    salt: str,
    registry_id: int,
    token: bytes,
    amount: int,
    seller: bytes,
    buyer: bytes,
    forwarder: Optional[bytes],
    seller_secret: tuple[str, ...],
    buyer_secret: tuple[str, ...],
    arbitrator_secret: tuple[str, ...],
    init_code: Optional[str],
) -> None:
    """Print the address the registry will deploy the escrow at."""
    forwarder = forwarder or config.trusted_forwarder
    if forwarder is None:
        raise click.UsageError("--forwarder is required when ESCROW_TRUSTED_FORWARDER is unset")
    code = bytes.fromhex(init_code.removeprefix("0x")) if init_code else config.init_code

    try:
        address = predict_escrow_address(
            registry,
            salt,
            forwarder,
            registry_id,
            token,
            amount,
            seller,
            buyer,
            [_commitment(s) for s in seller_secret],
            [_commitment(s) for s in buyer_secret],
            [_commitment(s) for s in arbitrator_secret],
            init_code=code,
        )
    except ValueError as exc:
        raise click.UsageError(str(exc)) from exc

    logger.debug("predicted escrow %d at %s", registry_id, address.hex())
    click.echo(checksum(address))


if __name__ == "__main__":
    main()
