"""Canonical state digest implementation (v1)."""
from __future__ import annotations

from typing import Any

from blake3 import blake3


def _hex_to_bytes(value: str | None) -> bytes:
    if value is None:
        return b""
    if not isinstance(value, str):
        raise TypeError("hex value must be string")
    v = value[2:] if value.startswith(("0x", "0X")) else value
    if v == "":
        return b""
    return bytes.fromhex(v)


def _u256_be(value: int) -> bytes:
    if value < 0:
        raise ValueError("u256 must be non-negative")
    return int(value).to_bytes(32, "big", signed=False)


def _address(value: str) -> bytes:
    addr = _hex_to_bytes(value)
    if len(addr) != 20:
        raise ValueError(f"address must be 20 bytes, got {len(addr)}")
    return addr


def _sorted_by_address(items: list[dict[str, Any]], key: str = "address") -> list[tuple[bytes, dict]]:
    sortable = [(_address(item.get(key, "")), item) for item in items]
    sortable.sort(key=lambda x: x[0])
    return sortable


def compute_state_digest(post_state: dict[str, Any]) -> str:
    """Compute state digest v1 from post_state.

    Tokens, registries and escrows are each sorted by address and encoded in
    canonical field order (uint256 big-endian); the result is BLAKE3-256.
    Event logs are not part of the digest.
    """
    if not isinstance(post_state, dict):
        post_state = {}
    buf = bytearray()

    tokens = _sorted_by_address(post_state.get("tokens", []))
    buf += _u256_be(len(tokens))
    for addr, tok in tokens:
        buf += addr
        buf += _u256_be(int(tok.get("total_supply", 0)))
        balances = _sorted_by_address(tok.get("balances", []), key="holder")
        buf += _u256_be(len(balances))
        for holder, entry in balances:
            buf += holder
            buf += _u256_be(int(entry.get("balance", 0)))

    registries = _sorted_by_address(post_state.get("registries", []))
    buf += _u256_be(len(registries))
    for addr, reg in registries:
        buf += addr
        buf += _address(reg.get("relay_identity", ""))
        buf += _u256_be(int(reg.get("escrow_count", 0)))
        buf += b"\x01" if reg.get("allow_repeat_reveal") else b"\x00"
        entries = sorted(reg.get("escrows", []), key=lambda e: int(e["id"]))
        buf += _u256_be(len(entries))
        for entry in entries:
            buf += _u256_be(int(entry["id"]))
            buf += _address(entry["address"])

    escrows = _sorted_by_address(post_state.get("escrows", []))
    buf += _u256_be(len(escrows))
    for addr, esc in escrows:
        buf += addr
        buf += b"\x01" if esc.get("resolved") else b"\x00"
        buf += _address(esc.get("registry", ""))
        buf += _u256_be(int(esc.get("registry_id", 0)))
        buf += _address(esc.get("token", ""))
        buf += _u256_be(int(esc.get("amount", 0)))
        buf += _address(esc.get("seller", ""))
        buf += _address(esc.get("buyer", ""))
        buf += _address(esc.get("relay_identity", ""))
        buf += b"\x01" if esc.get("allow_repeat_reveal") else b"\x00"
        commitments = sorted(
            (_hex_to_bytes(s["commitment"]), _address(s["to_address"]))
            for s in esc.get("secret_to_address", [])
        )
        buf += _u256_be(len(commitments))
        for commitment, to_address in commitments:
            buf += commitment
            buf += to_address
        votes = _sorted_by_address(esc.get("to_address_votes", []), key="to_address")
        buf += _u256_be(len(votes))
        for to_address, entry in votes:
            buf += to_address
            buf += _u256_be(int(entry.get("votes", 0)))
        revealed = sorted(_hex_to_bytes(h) for h in esc.get("revealed", []))
        buf += _u256_be(len(revealed))
        for h in revealed:
            buf += h

    return blake3(buf).hexdigest()
