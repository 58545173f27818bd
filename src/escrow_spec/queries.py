"""Read-only accessors mirroring the public getters of the deployed components.

Accessors on an escrow raise CONTRACT_NOT_FOUND once the instance has resolved,
since a terminated instance has no executable state left to answer them.
"""

from __future__ import annotations

from .config import ZERO_ADDRESS
from .errors import ErrorCode, SpecError
from .relay import is_trusted_forwarder
from .tx.escrow import live_escrow
from .tx.token import balance_of as _balance_of
from .types import RegistryState, WorldState


def _registry(state: WorldState, registry: bytes) -> RegistryState:
    r = state.registries.get(registry)
    if r is None:
        raise SpecError(ErrorCode.REGISTRY_NOT_FOUND, "registry not found")
    return r


# --- Registry ---


def escrow_count(state: WorldState, registry: bytes) -> int:
    return _registry(state, registry).escrow_count


def escrows(state: WorldState, registry: bytes, escrow_id: int) -> bytes:
    """Instance address for `escrow_id`; the zero address for unknown ids."""
    return _registry(state, registry).escrows.get(escrow_id, ZERO_ADDRESS)


def registry_trusted_forwarder(state: WorldState, registry: bytes) -> bytes:
    return _registry(state, registry).relay_identity


def registry_is_trusted_forwarder(state: WorldState, registry: bytes, forwarder: bytes) -> bool:
    return is_trusted_forwarder(_registry(state, registry).relay_identity, forwarder)


# --- Escrow ---


def has_code(state: WorldState, address: bytes) -> bool:
    """True while an unresolved escrow instance lives at `address`."""
    escrow = state.escrows.get(address)
    return escrow is not None and not escrow.resolved


def registry_id(state: WorldState, escrow: bytes) -> int:
    return live_escrow(state, escrow).registry_id


def token(state: WorldState, escrow: bytes) -> bytes:
    return live_escrow(state, escrow).token


def seller(state: WorldState, escrow: bytes) -> bytes:
    return live_escrow(state, escrow).seller


def buyer(state: WorldState, escrow: bytes) -> bytes:
    return live_escrow(state, escrow).buyer


def amount(state: WorldState, escrow: bytes) -> int:
    return live_escrow(state, escrow).amount


def secret_to_address(state: WorldState, escrow: bytes, double_hash: bytes) -> bytes:
    return live_escrow(state, escrow).secret_to_address.get(double_hash, ZERO_ADDRESS)


def to_address_votes(state: WorldState, escrow: bytes, to_address: bytes) -> int:
    return live_escrow(state, escrow).to_address_votes.get(to_address, 0)


def escrow_trusted_forwarder(state: WorldState, escrow: bytes) -> bytes:
    return live_escrow(state, escrow).relay_identity


def escrow_is_trusted_forwarder(state: WorldState, escrow: bytes, forwarder: bytes) -> bool:
    return is_trusted_forwarder(live_escrow(state, escrow).relay_identity, forwarder)


# --- Token ---


def balance_of(state: WorldState, token_address: bytes, holder: bytes) -> int:
    return _balance_of(state, token_address, holder)


def total_supply(state: WorldState, token_address: bytes) -> int:
    t = state.tokens.get(token_address)
    if t is None:
        raise SpecError(ErrorCode.TOKEN_NOT_FOUND, "token not found")
    return t.total_supply
