#!/usr/bin/env python3
"""Convert generated fixtures into client-consumable YAML vectors.

State cases become runnable vectors carrying the expected error code and the
canonical state digest of the post state; other fixtures are mirrored as-is.
"""

from __future__ import annotations

import argparse
import json
import shutil
import sys
from pathlib import Path
from typing import Any

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT / "src"))
sys.path.insert(0, str(ROOT / "tools"))

from escrow_spec.errors import ErrorCode  # noqa: E402
from escrow_spec.state_digest import compute_state_digest  # noqa: E402
from yaml_dump import write_yaml  # noqa: E402

MAPPING = {
    "crypto": "execution/crypto",
    "registry": "execution/registry",
    "escrow": "execution/escrow",
    "token": "execution/token",
}


def map_dest(rel: Path) -> Path:
    if not rel.parts:
        return Path("unmapped")
    mapped = MAPPING.get(rel.parts[0])
    if not mapped:
        return Path("unmapped") / rel
    return Path(mapped) / Path(*rel.parts[1:])


def _map_error_code(name: str | None) -> int:
    if not name:
        return int(ErrorCode.SUCCESS)
    try:
        return int(ErrorCode[name])
    except KeyError:
        return int(ErrorCode.UNKNOWN)


def case_to_vector(case: dict[str, Any]) -> dict[str, Any]:
    expected = case.get("expected", {})
    post_state = expected.get("post_state")
    return {
        "name": case.get("name", ""),
        "description": case.get("description", ""),
        "pre_state": case.get("pre_state"),
        "input": {"kind": "tx", "tx": case.get("tx")},
        "expected": {
            "success": bool(expected.get("ok", False)),
            "error_code": _map_error_code(expected.get("error")),
            "state_digest": compute_state_digest(post_state) if post_state else "",
            "events": expected.get("events", []),
            "post_state": post_state,
        },
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Convert fixtures to vectors")
    parser.add_argument("--fixtures", default=str(ROOT / "fixtures"))
    parser.add_argument("--vectors", default=str(ROOT / "vectors"))
    args = parser.parse_args()

    fixtures = Path(args.fixtures).resolve()
    vectors = Path(args.vectors).resolve()

    if not fixtures.exists():
        raise SystemExit(f"fixtures dir not found: {fixtures}")
    vectors.mkdir(parents=True, exist_ok=True)

    count = 0
    for path in sorted(fixtures.rglob("*.json")):
        rel = path.relative_to(fixtures)
        dest = vectors / map_dest(rel)
        dest.parent.mkdir(parents=True, exist_ok=True)

        data = json.loads(path.read_text())
        if isinstance(data, dict) and isinstance(data.get("cases"), list):
            write_yaml(
                dest.with_suffix(".yaml"),
                {"test_vectors": [case_to_vector(c) for c in data["cases"]]},
            )
        elif isinstance(data, dict) and isinstance(data.get("test_vectors"), list):
            write_yaml(dest.with_suffix(".yaml"), data)
        else:
            shutil.copy2(path, dest)
        count += 1

    print(f"Written {count} vector files into {vectors}")


if __name__ == "__main__":
    main()
