"""Escrow registry transitions (CreateEscrow, EscrowClosed notification)."""

from __future__ import annotations

import logging
from copy import deepcopy

from ..config import (
    ADDRESS_SIZE,
    COMMITMENTS_PER_PARTY,
    EVENT_ESCROW_CLOSED,
    EVENT_ESCROW_CREATED,
    HASH_SIZE,
    SALT_SIZE,
    UINT256_MAX,
    ZERO_ADDRESS,
)
from ..encoding import predict_escrow_address
from ..errors import ErrorCode, SpecError
from ..events import emit
from ..relay import effective_sender
from ..types import (
    CreateEscrowPayload,
    EscrowState,
    RegistryState,
    Transaction,
    TransactionType,
    WorldState,
)

logger = logging.getLogger(__name__)


def _registry(state: WorldState, address: bytes) -> RegistryState:
    registry = state.registries.get(address)
    if registry is None:
        raise SpecError(ErrorCode.REGISTRY_NOT_FOUND, "registry not found")
    return registry


def _check_address(name: str, value: object) -> None:
    if not isinstance(value, bytes) or len(value) != ADDRESS_SIZE:
        raise SpecError(ErrorCode.INVALID_ADDRESS, f"{name} must be a 20-byte address")


def _check_commitments(name: str, values: object) -> None:
    if not isinstance(values, (list, tuple)) or len(values) != COMMITMENTS_PER_PARTY:
        raise SpecError(
            ErrorCode.INVALID_PAYLOAD, f"{name} must hold {COMMITMENTS_PER_PARTY} commitments"
        )
    for v in values:
        if not isinstance(v, bytes) or len(v) != HASH_SIZE:
            raise SpecError(ErrorCode.INVALID_FORMAT, f"{name} entries must be 32-byte hashes")


def verify(state: WorldState, tx: Transaction) -> None:
    if tx.tx_type != TransactionType.CREATE_ESCROW:
        raise SpecError(ErrorCode.INVALID_TYPE, f"unsupported registry tx type: {tx.tx_type}")

    p = tx.payload
    if not isinstance(p, CreateEscrowPayload):
        raise SpecError(ErrorCode.INVALID_PAYLOAD, "create_escrow payload must be CreateEscrowPayload")

    registry = _registry(state, tx.target)
    effective_sender(registry.relay_identity, tx)

    _check_address("token", p.token)
    _check_address("seller", p.seller)
    _check_address("buyer", p.buyer)

    # Zero-amount escrows are degenerate but allowed.
    if not isinstance(p.amount, int) or isinstance(p.amount, bool) or p.amount < 0:
        raise SpecError(ErrorCode.INVALID_AMOUNT, "escrow amount must be a non-negative integer")
    if p.amount > UINT256_MAX:
        raise SpecError(ErrorCode.OVERFLOW, "escrow amount exceeds uint256 max")

    _check_commitments("seller_commitments", p.seller_commitments)
    _check_commitments("buyer_commitments", p.buyer_commitments)
    _check_commitments("arbitrator_commitments", p.arbitrator_commitments)
    # Each of the six commitments must map to exactly one recipient.
    commitments = [*p.seller_commitments, *p.buyer_commitments, *p.arbitrator_commitments]
    if len(set(commitments)) != len(commitments):
        raise SpecError(ErrorCode.INVALID_PAYLOAD, "commitments must be distinct")

    if not isinstance(p.salt, bytes) or len(p.salt) != SALT_SIZE:
        raise SpecError(ErrorCode.INVALID_FORMAT, "salt must be 32 bytes")


def escrow_address_for(registry: RegistryState, p: CreateEscrowPayload) -> bytes:
    """Deterministic address of the next escrow `registry` would create from `p`."""
    return predict_escrow_address(
        registry.address,
        p.salt,
        registry.relay_identity,
        registry.escrow_count,
        p.token,
        p.amount,
        p.seller,
        p.buyer,
        p.seller_commitments,
        p.buyer_commitments,
        p.arbitrator_commitments,
    )


def apply(state: WorldState, tx: Transaction) -> WorldState:
    if tx.tx_type != TransactionType.CREATE_ESCROW:
        raise SpecError(ErrorCode.INVALID_TYPE, f"unsupported registry tx type: {tx.tx_type}")

    ns = deepcopy(state)
    p = tx.payload
    registry = _registry(ns, tx.target)
    escrow_id = registry.escrow_count
    address = escrow_address_for(registry, p)

    if address in ns.escrows:
        raise SpecError(ErrorCode.INSTANCE_EXISTS, "instance already exists at this address")

    escrow = EscrowState(
        address=address,
        registry=registry.address,
        registry_id=escrow_id,
        token=p.token,
        amount=p.amount,
        seller=p.seller,
        buyer=p.buyer,
        relay_identity=registry.relay_identity,
        allow_repeat_reveal=registry.allow_repeat_reveal,
    )
    # First secret of each pair releases to the seller, second to the buyer.
    for commitments in (p.seller_commitments, p.buyer_commitments, p.arbitrator_commitments):
        escrow.secret_to_address[commitments[0]] = p.seller
        escrow.secret_to_address[commitments[1]] = p.buyer

    ns.escrows[address] = escrow
    registry.escrows[escrow_id] = address
    registry.escrow_count += 1

    emit(
        ns,
        registry.address,
        EVENT_ESCROW_CREATED,
        registry_id=escrow_id,
        escrow=address,
        token=p.token,
        seller=p.seller,
        buyer=p.buyer,
        amount=p.amount,
    )
    logger.info(
        "escrow %d created at 0x%s by 0x%s",
        escrow_id,
        address.hex(),
        effective_sender(registry.relay_identity, tx).hex(),
    )
    return ns


def close_escrow(state: WorldState, escrow: EscrowState) -> None:
    """Emit EscrowClosed from the registry on behalf of a resolving escrow."""
    registry = _registry(state, escrow.registry)
    if registry.escrows.get(escrow.registry_id, ZERO_ADDRESS) != escrow.address:
        raise SpecError(ErrorCode.UNAUTHORIZED, "caller is not an escrow of this registry")
    emit(
        state,
        registry.address,
        EVENT_ESCROW_CLOSED,
        registry_id=escrow.registry_id,
        escrow=escrow.address,
        token=escrow.token,
        seller=escrow.seller,
        buyer=escrow.buyer,
        amount=escrow.amount,
    )
