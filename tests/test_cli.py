"""Command-line helpers."""

from __future__ import annotations

from click.testing import CliRunner

from escrow_spec.cli import main
from escrow_spec.crypto.hash_algorithms import double_hash, hash_secret
from escrow_spec.encoding import checksum, predict_escrow_address
from escrow_spec.test_accounts import BUYER, REGISTRY, SELLER, TOKEN, TRUSTED_FORWARDER

SECRETS = {
    "seller": ("s1", "s2"),
    "buyer": ("b1", "b2"),
    "arbitrator": ("a1", "a2"),
}


def _predict_args(*extra: str) -> list[str]:
    args = [
        "predict-address",
        "--registry", "0x" + REGISTRY.hex(),
        "--salt", "salt",
        "--id", "4",
        "--token", "0x" + TOKEN.hex(),
        "--amount", "1000000",
        "--seller", checksum(SELLER),
        "--buyer", checksum(BUYER),
    ]
    for party, secrets in SECRETS.items():
        for s in secrets:
            args += [f"--{party}-secret", s]
    return args + list(extra)


def _expected(init_code: bytes | None = None) -> str:
    kwargs = {"init_code": init_code} if init_code is not None else {}
    return checksum(
        predict_escrow_address(
            REGISTRY,
            "salt",
            TRUSTED_FORWARDER,
            4,
            TOKEN,
            1_000_000,
            SELLER,
            BUYER,
            [double_hash(s) for s in SECRETS["seller"]],
            [double_hash(s) for s in SECRETS["buyer"]],
            [double_hash(s) for s in SECRETS["arbitrator"]],
            **kwargs,
        )
    )


def test_hash_secret_command() -> None:
    result = CliRunner().invoke(main, ["hash-secret", "hello world"])
    assert result.exit_code == 0
    assert result.output.strip() == "0x" + hash_secret("hello world").hex()


def test_double_hash_command() -> None:
    result = CliRunner().invoke(main, ["double-hash", "sellerSecretToReleaseToSeller"])
    assert result.exit_code == 0
    assert result.output.strip() == "0x" + double_hash("sellerSecretToReleaseToSeller").hex()


def test_predict_address() -> None:
    args = _predict_args("--forwarder", "0x" + TRUSTED_FORWARDER.hex())
    result = CliRunner().invoke(main, args, env={"ESCROW_TRUSTED_FORWARDER": ""})
    assert result.exit_code == 0, result.output
    assert result.output.strip() == _expected()


def test_predict_address_forwarder_from_env() -> None:
    result = CliRunner().invoke(
        main, _predict_args(), env={"ESCROW_TRUSTED_FORWARDER": TRUSTED_FORWARDER.hex()}
    )
    assert result.exit_code == 0, result.output
    assert result.output.strip() == _expected()


def test_predict_address_accepts_commitments() -> None:
    args = _predict_args("--forwarder", TRUSTED_FORWARDER.hex())
    i = args.index("s1")
    args[i] = "0x" + double_hash("s1").hex()
    result = CliRunner().invoke(main, args)
    assert result.exit_code == 0, result.output
    assert result.output.strip() == _expected()


def test_predict_address_custom_init_code() -> None:
    args = _predict_args("--forwarder", TRUSTED_FORWARDER.hex(), "--init-code", "0x6080")
    result = CliRunner().invoke(main, args)
    assert result.exit_code == 0, result.output
    assert result.output.strip() == _expected(bytes.fromhex("6080"))
    assert result.output.strip() != _expected()


def test_predict_address_requires_forwarder() -> None:
    result = CliRunner().invoke(main, _predict_args(), env={"ESCROW_TRUSTED_FORWARDER": ""})
    assert result.exit_code != 0
    assert "--forwarder" in result.output


def test_predict_address_rejects_bad_address() -> None:
    args = _predict_args("--forwarder", TRUSTED_FORWARDER.hex())
    args[args.index("--seller") + 1] = "0x1234"
    result = CliRunner().invoke(main, args)
    assert result.exit_code != 0


def test_predict_address_wrong_commitment_count() -> None:
    args = _predict_args("--forwarder", TRUSTED_FORWARDER.hex(), "--buyer-secret", "b3")
    result = CliRunner().invoke(main, args)
    assert result.exit_code != 0
    assert "commitments" in result.output
