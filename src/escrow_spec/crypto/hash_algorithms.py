"""Hash algorithm assignments for escrow commitments and addressing."""

from __future__ import annotations

from dataclasses import dataclass

from blake3 import blake3
from eth_hash.auto import keccak

from ..config import ADDRESS_SIZE, CREATE2_PREFIX, HASH_SIZE, SALT_SIZE


@dataclass(frozen=True)
class HashAssignment:
    purpose: str
    algorithm: str
    output_size: int
    input_spec: str


ASSIGNMENTS = [
    HashAssignment("secret_reveal", "KECCAK-256", 32, "utf8(secret)"),
    HashAssignment("secret_commitment", "KECCAK-256", 32, "keccak256(utf8(secret))"),
    HashAssignment("escrow_address", "KECCAK-256", 20, "0xff || deployer || salt || keccak256(init_code)"),
    HashAssignment("text_salt", "KECCAK-256", 32, "utf8(lowercase(salt))"),
    HashAssignment("state_digest", "BLAKE3", 32, "canonical post_state bytes"),
]


def keccak256(data: bytes) -> bytes:
    return keccak(bytes(data))


def blake3_hash(data: bytes) -> bytes:
    return blake3(data).digest()


def hash_secret(secret: str) -> bytes:
    """Reveal value for a secret: keccak256 of its UTF-8 bytes (ethers `id`)."""
    return keccak256(secret.encode("utf-8"))


def double_hash(secret: str) -> bytes:
    """Commitment stored at creation: keccak256(keccak256(secret))."""
    return keccak256(hash_secret(secret))


def commitment_of(revealed: bytes) -> bytes:
    return keccak256(revealed)


def salt_to_bytes(salt: str | bytes) -> bytes:
    """Normalize a salt the way the deployment tooling does.

    Raw 32-byte salts pass through. Strings containing ``0x`` are read as hex;
    any other string is lowercased and hashed.
    """
    if isinstance(salt, (bytes, bytearray)):
        raw = bytes(salt)
    else:
        text = salt.lower()
        if "0x" not in text:
            return keccak256(text.encode("utf-8"))
        raw = bytes.fromhex(text.replace("0x", "", 1))
    if len(raw) != SALT_SIZE:
        raise ValueError(f"salt must be {SALT_SIZE} bytes, got {len(raw)}")
    return raw


def create2_address(deployer: bytes, salt: bytes, init_code: bytes) -> bytes:
    """EIP-1014: keccak256(0xff ++ deployer ++ salt ++ keccak256(init_code))[12:]."""
    if len(deployer) != ADDRESS_SIZE:
        raise ValueError(f"deployer must be {ADDRESS_SIZE} bytes, got {len(deployer)}")
    if len(salt) != SALT_SIZE:
        raise ValueError(f"salt must be {SALT_SIZE} bytes, got {len(salt)}")
    return create2_address_from_code_hash(deployer, salt, keccak256(init_code))


def create2_address_from_code_hash(deployer: bytes, salt: bytes, code_hash: bytes) -> bytes:
    """Same rule for callers that only hold the init code hash."""
    if len(code_hash) != HASH_SIZE:
        raise ValueError(f"code hash must be {HASH_SIZE} bytes, got {len(code_hash)}")
    data = CREATE2_PREFIX + deployer + salt + code_hash
    return keccak256(data)[HASH_SIZE - ADDRESS_SIZE:]
