"""ABI encoding of the Escrow init payload and address prediction helpers."""

from __future__ import annotations

from typing import Sequence

from eth_abi import encode
from eth_utils import to_checksum_address

from .config import (
    ADDRESS_SIZE,
    COMMITMENTS_PER_PARTY,
    ESCROW_CONSTRUCTOR_TYPES,
    ESCROW_INIT_CODE,
    HASH_SIZE,
    UINT256_MAX,
)
from .crypto.hash_algorithms import create2_address, salt_to_bytes


def _require_address(name: str, value: bytes) -> bytes:
    if not isinstance(value, (bytes, bytearray)) or len(value) != ADDRESS_SIZE:
        raise ValueError(f"{name} must be a {ADDRESS_SIZE}-byte address")
    return bytes(value)


def _require_commitments(name: str, values: Sequence[bytes]) -> list[bytes]:
    if len(values) != COMMITMENTS_PER_PARTY:
        raise ValueError(f"{name} must hold exactly {COMMITMENTS_PER_PARTY} commitments")
    out = []
    for v in values:
        if not isinstance(v, (bytes, bytearray)) or len(v) != HASH_SIZE:
            raise ValueError(f"{name} entries must be {HASH_SIZE}-byte hashes")
        out.append(bytes(v))
    return out


def encode_constructor_args(
    trusted_forwarder: bytes,
    registry: bytes,
    registry_id: int,
    token: bytes,
    amount: int,
    seller: bytes,
    buyer: bytes,
    seller_commitments: Sequence[bytes],
    buyer_commitments: Sequence[bytes],
    arbitrator_commitments: Sequence[bytes],
) -> bytes:
    """ABI-encode the Escrow constructor arguments (standard, not packed)."""
    for n in (registry_id, amount):
        if not 0 <= n <= UINT256_MAX:
            raise ValueError("uint256 out of range")
    args = [
        _require_address("trusted_forwarder", trusted_forwarder),
        _require_address("registry", registry),
        registry_id,
        _require_address("token", token),
        amount,
        _require_address("seller", seller),
        _require_address("buyer", buyer),
        _require_commitments("seller_commitments", seller_commitments),
        _require_commitments("buyer_commitments", buyer_commitments),
        _require_commitments("arbitrator_commitments", arbitrator_commitments),
    ]
    return encode(list(ESCROW_CONSTRUCTOR_TYPES), args)


def build_init_code(constructor_args: bytes, init_code: bytes = ESCROW_INIT_CODE) -> bytes:
    return bytes(init_code) + constructor_args


def predict_escrow_address(
    registry: bytes,
    salt: str | bytes,
    trusted_forwarder: bytes,
    registry_id: int,
    token: bytes,
    amount: int,
    seller: bytes,
    buyer: bytes,
    seller_commitments: Sequence[bytes],
    buyer_commitments: Sequence[bytes],
    arbitrator_commitments: Sequence[bytes],
    init_code: bytes = ESCROW_INIT_CODE,
) -> bytes:
    """Address an Escrow will occupy once `registry` deploys it with `salt`.

    Pure and usable before the creation call is made. The registry address
    appears twice: once as the CREATE2 deployer and once as a constructor
    argument.
    """
    ctor = encode_constructor_args(
        trusted_forwarder,
        registry,
        registry_id,
        token,
        amount,
        seller,
        buyer,
        seller_commitments,
        buyer_commitments,
        arbitrator_commitments,
    )
    return create2_address(registry, salt_to_bytes(salt), build_init_code(ctor, init_code))


def checksum(address: bytes) -> str:
    return to_checksum_address(address)


def address_from_hex(value: str) -> bytes:
    v = value[2:] if value.startswith(("0x", "0X")) else value
    raw = bytes.fromhex(v)
    if len(raw) != ADDRESS_SIZE:
        raise ValueError(f"address must be {ADDRESS_SIZE} bytes, got {len(raw)}")
    return raw
