"""Meta-transaction relay (trusted forwarder) resolution.

A forwarded call arrives from the relay identity with the original sender
appended. Components that trust the relay treat such calls as if they were
sent by the embedded sender; every other call is attributed to its source.
"""

from __future__ import annotations

from .config import ADDRESS_SIZE
from .errors import ErrorCode, SpecError
from .types import Transaction


def is_trusted_forwarder(relay_identity: bytes, forwarder: bytes) -> bool:
    return forwarder == relay_identity


def effective_sender(relay_identity: bytes, tx: Transaction) -> bytes:
    """Resolve the caller the way ERC-2771 `_msgSender()` does."""
    if is_trusted_forwarder(relay_identity, tx.source) and tx.forwarded_sender is not None:
        if len(tx.forwarded_sender) != ADDRESS_SIZE:
            raise SpecError(ErrorCode.INVALID_ADDRESS, "forwarded sender must be 20 bytes")
        return tx.forwarded_sender
    return tx.source
