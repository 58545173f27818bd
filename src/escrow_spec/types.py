"""Core types for the escrow model.

The surrounding ledger is modelled as a plain `WorldState` value: token
balances, registries, escrow instances and the append-only event log. Every
state-mutating call is a `Transaction` applied by `state_transition.apply_tx`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from .config import ALLOW_REPEAT_REVEAL


class TransactionType(Enum):
    MINT = "mint"
    TRANSFER = "transfer"
    CREATE_ESCROW = "create_escrow"
    REVEAL_SECRET = "reveal_secret"


@dataclass
class Transaction:
    source: bytes
    target: bytes
    tx_type: TransactionType
    payload: object
    # Original sender appended by the relay when `source` is a trusted forwarder.
    forwarded_sender: Optional[bytes] = None


@dataclass
class Event:
    emitter: bytes
    name: str
    args: dict[str, Any] = field(default_factory=dict)


# --- Token (collaborator) ---


@dataclass
class TokenState:
    address: bytes
    balances: dict[bytes, int] = field(default_factory=dict)
    total_supply: int = 0


# --- Registry ---


@dataclass
class RegistryState:
    address: bytes
    relay_identity: bytes
    escrow_count: int = 0
    escrows: dict[int, bytes] = field(default_factory=dict)
    allow_repeat_reveal: bool = ALLOW_REPEAT_REVEAL


# --- Escrow ---


@dataclass
class EscrowState:
    address: bytes
    registry: bytes
    registry_id: int
    token: bytes
    amount: int
    seller: bytes
    buyer: bytes
    relay_identity: bytes
    secret_to_address: dict[bytes, bytes] = field(default_factory=dict)
    to_address_votes: dict[bytes, int] = field(default_factory=dict)
    revealed: set[bytes] = field(default_factory=set)
    allow_repeat_reveal: bool = ALLOW_REPEAT_REVEAL
    resolved: bool = False


@dataclass
class CreateEscrowPayload:
    token: bytes
    amount: int
    seller: bytes
    buyer: bytes
    seller_commitments: list[bytes]
    buyer_commitments: list[bytes]
    arbitrator_commitments: list[bytes]
    salt: bytes


# --- WorldState ---


@dataclass
class WorldState:
    tokens: dict[bytes, TokenState] = field(default_factory=dict)
    registries: dict[bytes, RegistryState] = field(default_factory=dict)
    escrows: dict[bytes, EscrowState] = field(default_factory=dict)
    logs: list[Event] = field(default_factory=list)
