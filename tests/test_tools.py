"""Fixture serialization, state digest and the consume / vector tools."""

from __future__ import annotations

import json
from pathlib import Path

from escrow_spec.crypto.hash_algorithms import double_hash, hash_secret, salt_to_bytes
from escrow_spec.state_digest import compute_state_digest
from escrow_spec.state_transition import apply_tx
from escrow_spec.test_accounts import (
    ARBITRATOR,
    BUYER,
    DEPLOYER,
    REGISTRY,
    SELLER,
    TOKEN,
    TRUSTED_FORWARDER,
)
from escrow_spec.types import (
    CreateEscrowPayload,
    RegistryState,
    TokenState,
    Transaction,
    TransactionType,
    WorldState,
)
from tools import consume, fill
from tools.fixtures_io import event_to_json, state_from_json, state_to_json, tx_from_json, tx_to_json
from tools.fixtures_to_vectors import case_to_vector, map_dest
from tools.yaml_dump import dump_yaml, load_yaml


def _funded_escrow() -> tuple[WorldState, bytes]:
    state = WorldState()
    state.tokens[TOKEN] = TokenState(address=TOKEN)
    state.registries[REGISTRY] = RegistryState(address=REGISTRY, relay_identity=TRUSTED_FORWARDER)
    payload = CreateEscrowPayload(
        token=TOKEN,
        amount=10,
        seller=SELLER,
        buyer=BUYER,
        seller_commitments=[double_hash("s-s"), double_hash("s-b")],
        buyer_commitments=[double_hash("b-s"), double_hash("b-b")],
        arbitrator_commitments=[double_hash("a-s"), double_hash("a-b")],
        salt=salt_to_bytes("salt"),
    )
    state, result = apply_tx(
        state, Transaction(SELLER, REGISTRY, TransactionType.CREATE_ESCROW, payload)
    )
    escrow = result.return_value
    state, _ = apply_tx(
        state, Transaction(DEPLOYER, TOKEN, TransactionType.MINT, {"to": escrow, "amount": 15})
    )
    return state, escrow


def _reveal(sender: bytes, escrow: bytes, secret: str) -> Transaction:
    return Transaction(
        sender, escrow, TransactionType.REVEAL_SECRET, {"secret_hash": hash_secret(secret)}
    )


def _case(name: str, pre: WorldState, tx: Transaction) -> dict:
    post, result = apply_tx(pre, tx)
    return {
        "name": name,
        "pre_state": state_to_json(pre),
        "tx": tx_to_json(tx),
        "expected": {
            "ok": result.ok,
            "error": result.error.code.name if result.error else None,
            "events": [event_to_json(e) for e in result.events],
            "post_state": state_to_json(post),
        },
    }


def test_state_json_round_trip() -> None:
    state, escrow = _funded_escrow()
    state, _ = apply_tx(state, _reveal(SELLER, escrow, "s-s"))

    restored = state_from_json(json.loads(json.dumps(state_to_json(state))))
    assert state_to_json(restored) == state_to_json(state)
    assert restored.escrows[escrow].to_address_votes == {SELLER: 1}
    assert restored.escrows[escrow].revealed == {double_hash("s-s")}
    # Logs are not carried by fixtures.
    assert restored.logs == []


def test_tx_json_round_trip() -> None:
    state, escrow = _funded_escrow()
    tx = _reveal(TRUSTED_FORWARDER, escrow, "b-b")
    tx.forwarded_sender = BUYER
    assert tx_from_json(tx_to_json(tx)) == tx

    mint = Transaction(DEPLOYER, TOKEN, TransactionType.MINT, {"to": ARBITRATOR, "amount": 3})
    assert tx_from_json(tx_to_json(mint)) == mint


def test_state_digest_is_order_independent() -> None:
    state, escrow = _funded_escrow()
    data = state_to_json(state)
    digest = compute_state_digest(data)
    assert len(digest) == 64

    shuffled = json.loads(json.dumps(data))
    shuffled["tokens"][0]["balances"].reverse()
    shuffled["escrows"][0]["secret_to_address"].reverse()
    assert compute_state_digest(shuffled) == digest

    state, _ = apply_tx(state, _reveal(SELLER, escrow, "s-s"))
    assert compute_state_digest(state_to_json(state)) != digest


def test_consume_replays_fixture(tmp_path: Path) -> None:
    state, escrow = _funded_escrow()
    voted, _ = apply_tx(state, _reveal(SELLER, escrow, "s-b"))
    cases = [
        _case("vote", state, _reveal(SELLER, escrow, "s-b")),
        _case("release", voted, _reveal(ARBITRATOR, escrow, "a-b")),
        _case("wrong", state, _reveal(BUYER, escrow, "nope")),
    ]
    path = tmp_path / "escrow.json"
    path.write_text(json.dumps({"cases": cases}))
    assert consume.check_state_cases(path) == []

    cases[1]["expected"]["events"] = []
    path.write_text(json.dumps({"cases": cases}))
    assert consume.check_state_cases(path) == ["release: events_mismatch"]


def test_case_to_vector() -> None:
    state, escrow = _funded_escrow()
    case = _case("wrong", state, _reveal(BUYER, escrow, "nope"))
    vector = case_to_vector(case)
    assert vector["expected"]["success"] is False
    assert vector["expected"]["error_code"] == 0x0210
    assert vector["expected"]["state_digest"] == compute_state_digest(state_to_json(state))
    assert load_yaml(dump_yaml({"test_vectors": [vector]})) == {"test_vectors": [vector]}


def test_map_dest() -> None:
    assert map_dest(Path("escrow/release.json")) == Path("execution/escrow/release.json")
    assert map_dest(Path("other/x.json")) == Path("unmapped/other/x.json")


def test_fill_invokes_pytest_with_output(tmp_path: Path, monkeypatch) -> None:
    calls = []

    def fake_call(cmd, env, cwd):
        calls.append((cmd, env))
        return 0

    stale = tmp_path / "fixtures"
    stale.mkdir()
    (stale / "old.json").write_text("{}")
    monkeypatch.setattr(fill.subprocess, "call", fake_call)

    assert fill.main(["--out", str(stale), "--clean", "-k", "escrow"]) == 0
    assert not stale.exists()
    [(cmd, env)] = calls
    assert cmd[cmd.index("--output") + 1] == str(stale.resolve())
    assert cmd[-2:] == ["-k", "escrow"]
    assert str(fill.ROOT / "src") in env["PYTHONPATH"]


def test_state_digest_covers_escrow_terms() -> None:
    state, escrow = _funded_escrow()
    data = state_to_json(state)
    digest = compute_state_digest(data)

    remapped = json.loads(json.dumps(data))
    for entry in remapped["escrows"][0]["secret_to_address"]:
        entry["to_address"] = SELLER.hex()
    assert compute_state_digest(remapped) != digest

    permissive = json.loads(json.dumps(data))
    permissive["escrows"][0]["allow_repeat_reveal"] = True
    assert compute_state_digest(permissive) != digest

    relayed = json.loads(json.dumps(data))
    relayed["escrows"][0]["relay_identity"] = ARBITRATOR.hex()
    assert compute_state_digest(relayed) != digest


def test_state_digest_counts_registry_entries() -> None:
    state, _ = _funded_escrow()
    data = state_to_json(state)
    digest = compute_state_digest(data)

    dropped = json.loads(json.dumps(data))
    dropped["registries"][0]["escrows"] = []
    assert compute_state_digest(dropped) != digest
