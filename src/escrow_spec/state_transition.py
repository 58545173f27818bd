"""State transition entrypoints for the escrow model."""

from __future__ import annotations

import logging
from typing import Optional

from .config import ADDRESS_SIZE, EVENT_ESCROW_CREATED
from .errors import ErrorCode, SpecError
from .types import Event, Transaction, TransactionType, WorldState
from .tx import escrow as tx_escrow
from .tx import registry as tx_registry
from .tx import token as tx_token

logger = logging.getLogger(__name__)

_TOKEN_TYPES = frozenset({
    TransactionType.MINT,
    TransactionType.TRANSFER,
})


class TransitionResult:
    """Thin wrapper for verify/apply results."""

    def __init__(
        self,
        ok: bool,
        error: Optional[SpecError] = None,
        events: Optional[list[Event]] = None,
        return_value: Optional[bytes] = None,
    ):
        self.ok = ok
        self.error = error
        self.events = events or []
        self.return_value = return_value

    @classmethod
    def success(
        cls, events: Optional[list[Event]] = None, return_value: Optional[bytes] = None
    ) -> "TransitionResult":
        return cls(True, None, events, return_value)

    @classmethod
    def failure(cls, error: SpecError) -> "TransitionResult":
        return cls(False, error)


def _dispatch_verify(state: WorldState, tx: Transaction) -> None:
    tt = tx.tx_type
    if tt in _TOKEN_TYPES:
        return tx_token.verify(state, tx)
    if tt == TransactionType.CREATE_ESCROW:
        return tx_registry.verify(state, tx)
    if tt == TransactionType.REVEAL_SECRET:
        return tx_escrow.verify(state, tx)

    raise SpecError(ErrorCode.NOT_IMPLEMENTED, f"verify not implemented for {tx.tx_type}")


def _dispatch_apply(state: WorldState, tx: Transaction) -> WorldState:
    tt = tx.tx_type
    if tt in _TOKEN_TYPES:
        return tx_token.apply(state, tx)
    if tt == TransactionType.CREATE_ESCROW:
        return tx_registry.apply(state, tx)
    if tt == TransactionType.REVEAL_SECRET:
        return tx_escrow.apply(state, tx)

    raise SpecError(ErrorCode.NOT_IMPLEMENTED, f"apply not implemented for {tx.tx_type}")


def _verify_common(tx: Transaction) -> None:
    if not isinstance(tx.tx_type, TransactionType):
        raise SpecError(ErrorCode.INVALID_TYPE, "unknown transaction type")
    if not isinstance(tx.source, bytes) or len(tx.source) != ADDRESS_SIZE:
        raise SpecError(ErrorCode.INVALID_ADDRESS, "source must be a 20-byte address")
    if not isinstance(tx.target, bytes) or len(tx.target) != ADDRESS_SIZE:
        raise SpecError(ErrorCode.INVALID_ADDRESS, "target must be a 20-byte address")
    if tx.forwarded_sender is not None and (
        not isinstance(tx.forwarded_sender, bytes) or len(tx.forwarded_sender) != ADDRESS_SIZE
    ):
        raise SpecError(ErrorCode.INVALID_ADDRESS, "forwarded sender must be a 20-byte address")


def verify_tx(state: WorldState, tx: Transaction) -> TransitionResult:
    """Stateless + stateful verification for a single tx."""
    try:
        _verify_common(tx)
        _dispatch_verify(state, tx)
        return TransitionResult.success()
    except SpecError as exc:
        return TransitionResult.failure(exc)


def apply_tx(state: WorldState, tx: Transaction) -> tuple[WorldState, TransitionResult]:
    """Apply tx to state after verification.

    Every call is all-or-nothing: on any failure the original state object is
    returned untouched and no event is recorded.
    """
    try:
        _verify_common(tx)
        _dispatch_verify(state, tx)
    except SpecError as exc:
        logger.debug("rejected %s: %s", tx.tx_type, exc)
        return state, TransitionResult.failure(exc)

    try:
        working = _dispatch_apply(state, tx)
    except SpecError as exc:
        # Execution failure: state unchanged
        logger.debug("reverted %s: %s", tx.tx_type, exc)
        return state, TransitionResult.failure(exc)

    events = working.logs[len(state.logs):]
    return_value = None
    if tx.tx_type == TransactionType.CREATE_ESCROW:
        created = [e for e in events if e.name == EVENT_ESCROW_CREATED]
        return_value = created[0].args["escrow"]
    return working, TransitionResult.success(events, return_value)


def apply_block(state: WorldState, txs: list[Transaction]) -> tuple[WorldState, TransitionResult]:
    """Apply a sequence of transactions in order (block-atomic semantics).

    If any transaction fails, the entire block is rejected and the state is
    unchanged.
    """
    working = state
    events: list[Event] = []
    for tx in txs:
        working, result = apply_tx(working, tx)
        if not result.ok:
            return state, result
        events.extend(result.events)
    return working, TransitionResult.success(events)
