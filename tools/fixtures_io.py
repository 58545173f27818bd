"""Helpers to serialize/deserialize minimal fixtures for the escrow model."""

from __future__ import annotations

from typing import Any

from escrow_spec.types import (
    CreateEscrowPayload,
    EscrowState,
    Event,
    RegistryState,
    TokenState,
    Transaction,
    TransactionType,
    WorldState,
)


def _hex_to_bytes(v: str) -> bytes:
    return bytes.fromhex(v)


def _bytes_to_hex(v: bytes) -> str:
    return v.hex()


def state_to_json(state: WorldState) -> dict[str, Any]:
    result: dict[str, Any] = {
        "tokens": [
            {
                "address": _bytes_to_hex(t.address),
                "total_supply": t.total_supply,
                "balances": [
                    {"holder": _bytes_to_hex(holder), "balance": balance}
                    for holder, balance in t.balances.items()
                ],
            }
            for t in state.tokens.values()
        ],
        "registries": [
            {
                "address": _bytes_to_hex(r.address),
                "relay_identity": _bytes_to_hex(r.relay_identity),
                "escrow_count": r.escrow_count,
                "allow_repeat_reveal": r.allow_repeat_reveal,
                "escrows": [
                    {"id": escrow_id, "address": _bytes_to_hex(addr)}
                    for escrow_id, addr in r.escrows.items()
                ],
            }
            for r in state.registries.values()
        ],
    }

    if state.escrows:
        result["escrows"] = [
            {
                "address": _bytes_to_hex(e.address),
                "registry": _bytes_to_hex(e.registry),
                "registry_id": e.registry_id,
                "token": _bytes_to_hex(e.token),
                "amount": e.amount,
                "seller": _bytes_to_hex(e.seller),
                "buyer": _bytes_to_hex(e.buyer),
                "relay_identity": _bytes_to_hex(e.relay_identity),
                "secret_to_address": [
                    {"commitment": _bytes_to_hex(c), "to_address": _bytes_to_hex(a)}
                    for c, a in e.secret_to_address.items()
                ],
                "to_address_votes": [
                    {"to_address": _bytes_to_hex(a), "votes": v}
                    for a, v in e.to_address_votes.items()
                ],
                "revealed": sorted(_bytes_to_hex(c) for c in e.revealed),
                "allow_repeat_reveal": e.allow_repeat_reveal,
                "resolved": e.resolved,
            }
            for e in state.escrows.values()
        ]

    return result


def state_from_json(data: dict[str, Any]) -> WorldState:
    state = WorldState()

    for t in data.get("tokens", []):
        token = TokenState(
            address=_hex_to_bytes(t["address"]),
            total_supply=t.get("total_supply", 0),
            balances={
                _hex_to_bytes(b["holder"]): b.get("balance", 0) for b in t.get("balances", [])
            },
        )
        state.tokens[token.address] = token

    for r in data.get("registries", []):
        registry = RegistryState(
            address=_hex_to_bytes(r["address"]),
            relay_identity=_hex_to_bytes(r["relay_identity"]),
            escrow_count=r.get("escrow_count", 0),
            allow_repeat_reveal=r.get("allow_repeat_reveal", False),
            escrows={int(e["id"]): _hex_to_bytes(e["address"]) for e in r.get("escrows", [])},
        )
        state.registries[registry.address] = registry

    for e in data.get("escrows", []):
        escrow = EscrowState(
            address=_hex_to_bytes(e["address"]),
            registry=_hex_to_bytes(e["registry"]),
            registry_id=e["registry_id"],
            token=_hex_to_bytes(e["token"]),
            amount=e["amount"],
            seller=_hex_to_bytes(e["seller"]),
            buyer=_hex_to_bytes(e["buyer"]),
            relay_identity=_hex_to_bytes(e["relay_identity"]),
            secret_to_address={
                _hex_to_bytes(s["commitment"]): _hex_to_bytes(s["to_address"])
                for s in e.get("secret_to_address", [])
            },
            to_address_votes={
                _hex_to_bytes(v["to_address"]): v["votes"] for v in e.get("to_address_votes", [])
            },
            revealed={_hex_to_bytes(c) for c in e.get("revealed", [])},
            allow_repeat_reveal=e.get("allow_repeat_reveal", False),
            resolved=e.get("resolved", False),
        )
        state.escrows[escrow.address] = escrow

    return state


def _payload_to_json(payload: Any) -> Any:
    """Recursively convert a payload value, turning bytes into hex strings."""
    if payload is None:
        return None
    if isinstance(payload, (bytes, bytearray)):
        return _bytes_to_hex(bytes(payload))
    if isinstance(payload, dict):
        return {k: _payload_to_json(v) for k, v in payload.items()}
    if isinstance(payload, (list, tuple)):
        return [_payload_to_json(item) for item in payload]
    return payload


def tx_to_json(tx: Transaction) -> dict[str, Any]:
    payload: Any
    if isinstance(tx.payload, CreateEscrowPayload):
        p = tx.payload
        payload = {
            "token": _bytes_to_hex(p.token),
            "amount": p.amount,
            "seller": _bytes_to_hex(p.seller),
            "buyer": _bytes_to_hex(p.buyer),
            "seller_commitments": [_bytes_to_hex(c) for c in p.seller_commitments],
            "buyer_commitments": [_bytes_to_hex(c) for c in p.buyer_commitments],
            "arbitrator_commitments": [_bytes_to_hex(c) for c in p.arbitrator_commitments],
            "salt": _bytes_to_hex(p.salt),
        }
    else:
        payload = _payload_to_json(tx.payload)

    result: dict[str, Any] = {
        "source": _bytes_to_hex(tx.source),
        "target": _bytes_to_hex(tx.target),
        "tx_type": tx.tx_type.value,
        "payload": payload,
    }
    if tx.forwarded_sender is not None:
        result["forwarded_sender"] = _bytes_to_hex(tx.forwarded_sender)
    return result


def tx_from_json(data: dict[str, Any]) -> Transaction:
    tx_type = TransactionType(data["tx_type"])
    raw = data.get("payload") or {}
    payload: Any
    if tx_type == TransactionType.CREATE_ESCROW:
        payload = CreateEscrowPayload(
            token=_hex_to_bytes(raw["token"]),
            amount=raw["amount"],
            seller=_hex_to_bytes(raw["seller"]),
            buyer=_hex_to_bytes(raw["buyer"]),
            seller_commitments=[_hex_to_bytes(c) for c in raw["seller_commitments"]],
            buyer_commitments=[_hex_to_bytes(c) for c in raw["buyer_commitments"]],
            arbitrator_commitments=[_hex_to_bytes(c) for c in raw["arbitrator_commitments"]],
            salt=_hex_to_bytes(raw["salt"]),
        )
    elif tx_type == TransactionType.REVEAL_SECRET:
        payload = {"secret_hash": _hex_to_bytes(raw["secret_hash"])}
    else:
        payload = {"to": _hex_to_bytes(raw["to"]), "amount": raw["amount"]}

    forwarded = data.get("forwarded_sender")
    return Transaction(
        source=_hex_to_bytes(data["source"]),
        target=_hex_to_bytes(data["target"]),
        tx_type=tx_type,
        payload=payload,
        forwarded_sender=_hex_to_bytes(forwarded) if forwarded else None,
    )


def event_to_json(event: Event) -> dict[str, Any]:
    return {
        "emitter": _bytes_to_hex(event.emitter),
        "name": event.name,
        "args": _payload_to_json(event.args),
    }
