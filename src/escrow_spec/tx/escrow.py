"""Escrow instance transitions (RevealSecretToReleaseTo).

Commitments are keccak256(keccak256(secret)). A voter reveals the single hash;
the instance re-hashes it, looks up the committed recipient and counts a vote.
The first recipient to reach RELEASE_THRESHOLD votes receives the escrowed
amount, any surplus goes to the registry, and the instance is tombstoned.
"""

from __future__ import annotations

import logging
from copy import deepcopy

from ..config import (
    EVENT_SECRET_REVEALED,
    EVENT_TOKENS_RELEASED,
    HASH_SIZE,
    RELEASE_THRESHOLD,
)
from ..crypto.hash_algorithms import commitment_of
from ..errors import ErrorCode, SpecError
from ..events import emit
from ..types import EscrowState, Transaction, TransactionType, WorldState
from . import registry as tx_registry
from . import token as tx_token

logger = logging.getLogger(__name__)


def live_escrow(state: WorldState, address: bytes) -> EscrowState:
    escrow = state.escrows.get(address)
    if escrow is None or escrow.resolved:
        raise SpecError(ErrorCode.CONTRACT_NOT_FOUND, "no escrow instance at this address")
    return escrow


def _revealed_key(p: object) -> bytes:
    if not isinstance(p, dict):
        raise SpecError(ErrorCode.INVALID_PAYLOAD, "reveal payload must be dict")
    revealed = p.get("secret_hash")
    if not isinstance(revealed, bytes) or len(revealed) != HASH_SIZE:
        raise SpecError(ErrorCode.INVALID_FORMAT, "revealed hash must be 32 bytes")
    return commitment_of(revealed)


def _target_for(escrow: EscrowState, key: bytes) -> bytes:
    target = escrow.secret_to_address.get(key)
    if target is None:
        raise SpecError(ErrorCode.WRONG_SECRET, "Wrong secret")
    if key in escrow.revealed and not escrow.allow_repeat_reveal:
        raise SpecError(ErrorCode.SECRET_ALREADY_REVEALED, "secret already revealed")
    return target


def verify(state: WorldState, tx: Transaction) -> None:
    if tx.tx_type != TransactionType.REVEAL_SECRET:
        raise SpecError(ErrorCode.INVALID_TYPE, f"unsupported escrow tx type: {tx.tx_type}")
    escrow = live_escrow(state, tx.target)
    _target_for(escrow, _revealed_key(tx.payload))


def apply(state: WorldState, tx: Transaction) -> WorldState:
    if tx.tx_type != TransactionType.REVEAL_SECRET:
        raise SpecError(ErrorCode.INVALID_TYPE, f"unsupported escrow tx type: {tx.tx_type}")

    ns = deepcopy(state)
    escrow = live_escrow(ns, tx.target)
    key = _revealed_key(tx.payload)
    target = _target_for(escrow, key)

    escrow.to_address_votes[target] = escrow.to_address_votes.get(target, 0) + 1
    escrow.revealed.add(key)
    emit(ns, escrow.address, EVENT_SECRET_REVEALED, to_address=target)
    logger.debug(
        "escrow %d: vote for 0x%s (%d/%d)",
        escrow.registry_id,
        target.hex(),
        escrow.to_address_votes[target],
        RELEASE_THRESHOLD,
    )

    if escrow.to_address_votes[target] >= RELEASE_THRESHOLD:
        _release(ns, escrow, target)
    return ns


def _release(state: WorldState, escrow: EscrowState, target: bytes) -> None:
    balance = tx_token.balance_of(state, escrow.token, escrow.address)

    tx_token.transfer_balance(state, escrow.token, escrow.address, target, escrow.amount)
    surplus = balance - escrow.amount
    if surplus > 0:
        tx_token.transfer_balance(state, escrow.token, escrow.address, escrow.registry, surplus)

    emit(
        state,
        escrow.address,
        EVENT_TOKENS_RELEASED,
        token=escrow.token,
        to_address=target,
        amount=escrow.amount,
    )
    tx_registry.close_escrow(state, escrow)

    escrow.resolved = True
    escrow.to_address_votes.clear()
    logger.info(
        "escrow %d resolved to 0x%s (amount=%d, swept=%d)",
        escrow.registry_id,
        target.hex(),
        escrow.amount,
        max(surplus, 0),
    )
