"""Regenerate escrow fixtures by running the test suite with --output."""

from __future__ import annotations

import argparse
import os
import shutil
import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Fill escrow fixtures")
    parser.add_argument("--out", default=str(ROOT / "fixtures"))
    parser.add_argument("--clean", action="store_true", help="Remove existing fixtures first")
    args, pytest_args = parser.parse_known_args(argv)

    out = Path(args.out).resolve()
    if args.clean and out.exists():
        shutil.rmtree(out)

    env = dict(os.environ)
    # tests import both escrow_spec (src/) and tools.fixtures_io (repo root)
    env["PYTHONPATH"] = os.pathsep.join([str(ROOT / "src"), str(ROOT)])

    cmd = [sys.executable, "-m", "pytest", str(ROOT / "tests"), "-q", "--output", str(out)]
    cmd.extend(pytest_args)
    print("Running:", " ".join(cmd))
    return subprocess.call(cmd, env=env, cwd=str(ROOT))


if __name__ == "__main__":
    raise SystemExit(main())
