"""Token ledger transitions (Mint, Transfer).

A minimal fungible-token collaborator with ERC20-mock semantics: anyone may
mint, transfers move the sender's own balance, balances are uint256.
"""

from __future__ import annotations

from copy import deepcopy

from ..config import ADDRESS_SIZE, EVENT_TRANSFER, UINT256_MAX, ZERO_ADDRESS
from ..errors import ErrorCode, SpecError
from ..events import emit
from ..types import TokenState, Transaction, TransactionType, WorldState


def _token(state: WorldState, address: bytes) -> TokenState:
    token = state.tokens.get(address)
    if token is None:
        raise SpecError(ErrorCode.TOKEN_NOT_FOUND, "token not found")
    return token


def _check_amount(amount: object) -> int:
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise SpecError(ErrorCode.INVALID_AMOUNT, "amount must be an integer")
    if amount < 0:
        raise SpecError(ErrorCode.INVALID_AMOUNT, "amount must be >= 0")
    if amount > UINT256_MAX:
        raise SpecError(ErrorCode.OVERFLOW, "amount exceeds uint256 max")
    return amount


def _check_recipient(to: object) -> bytes:
    if not isinstance(to, bytes) or len(to) != ADDRESS_SIZE:
        raise SpecError(ErrorCode.INVALID_ADDRESS, "recipient must be a 20-byte address")
    if to == ZERO_ADDRESS:
        raise SpecError(ErrorCode.INVALID_ADDRESS, "transfer to the zero address")
    return to


def balance_of(state: WorldState, token: bytes, holder: bytes) -> int:
    return _token(state, token).balances.get(holder, 0)


def transfer_balance(
    state: WorldState, token: bytes, sender: bytes, recipient: bytes, amount: int
) -> None:
    """Move `amount` of `token` from `sender` to `recipient` in place.

    Callers pass a working copy; a raised SpecError leaves it half-written and
    must be discarded.
    """
    ledger = _token(state, token)
    _check_recipient(recipient)
    held = ledger.balances.get(sender, 0)
    if held < amount:
        raise SpecError(ErrorCode.INSUFFICIENT_BALANCE, "transfer amount exceeds balance")
    ledger.balances[sender] = held - amount
    received = ledger.balances.get(recipient, 0)
    if received + amount > UINT256_MAX:
        raise SpecError(ErrorCode.OVERFLOW, "recipient balance overflow")
    ledger.balances[recipient] = received + amount
    emit(state, token, EVENT_TRANSFER, sender=sender, recipient=recipient, amount=amount)


def verify(state: WorldState, tx: Transaction) -> None:
    p = tx.payload
    if not isinstance(p, dict):
        raise SpecError(ErrorCode.INVALID_PAYLOAD, "token payload must be dict")
    if tx.tx_type not in (TransactionType.MINT, TransactionType.TRANSFER):
        raise SpecError(ErrorCode.INVALID_TYPE, f"unsupported token tx type: {tx.tx_type}")

    ledger = _token(state, tx.target)
    _check_recipient(p.get("to"))
    amount = _check_amount(p.get("amount", 0))

    if tx.tx_type == TransactionType.MINT:
        if ledger.total_supply + amount > UINT256_MAX:
            raise SpecError(ErrorCode.OVERFLOW, "total supply overflow")
        return

    if ledger.balances.get(tx.source, 0) < amount:
        raise SpecError(ErrorCode.INSUFFICIENT_BALANCE, "transfer amount exceeds balance")


def apply(state: WorldState, tx: Transaction) -> WorldState:
    ns = deepcopy(state)
    p = tx.payload
    to = p["to"]
    amount = p.get("amount", 0)

    if tx.tx_type == TransactionType.MINT:
        ledger = _token(ns, tx.target)
        ledger.total_supply += amount
        ledger.balances[to] = ledger.balances.get(to, 0) + amount
        emit(ns, tx.target, EVENT_TRANSFER, sender=ZERO_ADDRESS, recipient=to, amount=amount)
        return ns

    if tx.tx_type == TransactionType.TRANSFER:
        transfer_balance(ns, tx.target, tx.source, to, amount)
        return ns

    raise SpecError(ErrorCode.INVALID_TYPE, f"unsupported token tx type: {tx.tx_type}")
