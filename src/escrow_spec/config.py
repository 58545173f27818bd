"""Escrow configuration constants.

Keep the sizes and the init code aligned with the on-chain `Escrow` /
`EscrowRegistry` contracts so address predictions stay bit-exact.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

# Sizes
ADDRESS_SIZE = 20
HASH_SIZE = 32
SALT_SIZE = 32
ZERO_ADDRESS = bytes(ADDRESS_SIZE)

# uint256 bounds
UINT256_MAX = (1 << 256) - 1

# Voting
COMMITMENTS_PER_PARTY = 2
RELEASE_THRESHOLD = 2
# Repeat reveals of one commitment are rejected unless a registry opts in.
ALLOW_REPEAT_REVEAL = False

# CREATE2 (EIP-1014)
CREATE2_PREFIX = b"\xff"

# Stand-in for the compiled Escrow creation bytecode. Callers that need to match
# a real deployment pass the compiled bytecode to `predict_escrow_address`.
ESCROW_INIT_CODE = b"escrow-spec:Escrow:v1"

# ABI layout of the Escrow constructor, in argument order.
ESCROW_CONSTRUCTOR_TYPES = (
    "address",  # trustedForwarder
    "address",  # registry
    "uint256",  # registryId
    "address",  # token
    "uint256",  # amount
    "address",  # seller
    "address",  # buyer
    "bytes32[2]",  # secretsOfSeller
    "bytes32[2]",  # secretsOfBuyer
    "bytes32[2]",  # secretsOfArbitrator
)

# Event names
EVENT_ESCROW_CREATED = "EscrowCreated"
EVENT_SECRET_REVEALED = "SecretRevealedToReleaseTo"
EVENT_TOKENS_RELEASED = "TokensReleased"
EVENT_ESCROW_CLOSED = "EscrowClosed"
EVENT_TRANSFER = "Transfer"


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").lower() in ("true", "1", "yes")


@dataclass
class ToolConfig:
    """Settings for the command-line helpers."""
    init_code: bytes = ESCROW_INIT_CODE
    trusted_forwarder: Optional[bytes] = None
    verbose: bool = False

    @classmethod
    def from_env(cls) -> "ToolConfig":
        """Load configuration from environment variables."""
        config = cls()

        init_code_hex = os.environ.get("ESCROW_INIT_CODE", "")
        if init_code_hex:
            config.init_code = bytes.fromhex(init_code_hex.removeprefix("0x"))

        forwarder_hex = os.environ.get("ESCROW_TRUSTED_FORWARDER", "")
        if forwarder_hex:
            config.trusted_forwarder = bytes.fromhex(forwarder_hex.removeprefix("0x"))

        config.verbose = _env_flag("VERBOSE")
        return config
