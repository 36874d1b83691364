"""
validate.py – End-to-end local validation of Mentor Assistant in MOCK_MODE.

Usage:
    python scripts/validate.py              # run all scenarios
    python scripts/validate.py --scenario 2 # run a specific scenario
    python scripts/validate.py --no-server  # assume the server is already running

Starts the FastAPI server with MOCK_MODE=true and the seeded mock incident
store, sends each scenario request and checks status code and body against
the output schemas.
"""

from __future__ import annotations

import argparse
import os
import subprocess
import sys
import time
from pathlib import Path

import jsonschema
import requests

ROOT = Path(__file__).resolve().parent.parent
MOCK_DATA_FILE = ROOT / "scripts" / "scenarios" / "mock_incidents.json"

BASE_URL = "http://localhost:3000"
STARTUP_TIMEOUT = 15  # seconds

sys.path.insert(0, str(ROOT))
from mentor_assistant.formats import EMPTY_SUMMARY  # noqa: E402
from mentor_assistant.schemas import PATTERNS_OUTPUT_SCHEMA, SCORECARD_OUTPUT_SCHEMA  # noqa: E402

# (name, path, token, expected status, schema or None)
SCENARIOS: list[tuple[str, str, str | None, int, dict | None]] = [
    ("empty scorecard", "/summary/m1/t1", "mock-m1", 200, SCORECARD_OUTPUT_SCHEMA),
    ("scorecard", "/summary/m1/t2", "mock-m1", 200, SCORECARD_OUTPUT_SCHEMA),
    ("patterns", "/summary/m1/t2/patterns", "mock-m1", 200, PATTERNS_OUTPUT_SCHEMA),
    ("missing token", "/summary/m1/t2", None, 401, None),
    ("bad token", "/summary/m1/t2", "not-a-mock-token", 403, None),
    ("other mentor", "/summary/m2/t9", "mock-m1", 403, None),
]


def wait_for_server(url: str, timeout: int) -> bool:
    """Poll /health until the server is ready."""
    deadline = time.time() + timeout
    while time.time() < deadline:
        try:
            r = requests.get(f"{url}/health", timeout=2)
            if r.status_code == 200:
                return True
        except requests.ConnectionError:
            pass
        time.sleep(0.5)
    return False


def run_scenario(name: str, path: str, token: str | None, expected: int, schema: dict | None) -> tuple[bool, str]:
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    try:
        r = requests.get(f"{BASE_URL}{path}", headers=headers, timeout=30)
    except requests.ConnectionError:
        return False, f"{name}: Connection refused – is the server running?"

    if r.status_code != expected:
        return False, f"{name}: expected HTTP {expected}, got {r.status_code} – {r.text[:200]}"

    errors: list[str] = []
    data = r.json()
    if schema is not None:
        if data.get("summary") == EMPTY_SUMMARY:
            if any(data[k] for k in data if k != "summary"):
                errors.append("empty result carries non-empty fields")
        else:
            try:
                jsonschema.validate(instance=data, schema=schema)
            except jsonschema.ValidationError as exc:
                errors.append(f"Schema validation: {exc.message}")
        if r.headers.get("X-Schema-Valid") == "false":
            errors.append("Server returned X-Schema-Valid: false header")

    if errors:
        return False, f"{name}: FAIL\n    " + "\n    ".join(errors)
    return True, f"{name}: PASS"


def main():
    parser = argparse.ArgumentParser(description="Validate Mentor Assistant locally")
    parser.add_argument("--scenario", type=int, help="Run only scenario N (1-based)")
    parser.add_argument("--no-server", action="store_true", help="Skip starting the server (assume it is running)")
    args = parser.parse_args()

    scenarios = SCENARIOS if args.scenario is None else [SCENARIOS[args.scenario - 1]]

    server_proc = None
    if not args.no_server:
        print("Starting server with MOCK_MODE=true ...")
        env = os.environ.copy()
        env["MOCK_MODE"] = "true"
        env["MOCK_DATA_FILE"] = str(MOCK_DATA_FILE)
        server_proc = subprocess.Popen(
            [sys.executable, "-m", "uvicorn", "mentor_assistant.main:create_app", "--factory",
             "--host", "127.0.0.1", "--port", "3000"],
            cwd=str(ROOT),
            env=env,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
        if not wait_for_server(BASE_URL, STARTUP_TIMEOUT):
            server_proc.terminate()
            print("ERROR: Server failed to start within timeout")
            sys.exit(1)
        print("Server is ready.\n")

    try:
        passed = failed = 0
        print(f"Running {len(scenarios)} scenario(s) ...\n")
        print("-" * 60)
        for scenario in scenarios:
            ok, msg = run_scenario(*scenario)
            if ok:
                passed += 1
                print(f"  PASS  {msg}")
            else:
                failed += 1
                print(f"  FAIL  {msg}")
        print("-" * 60)
        print(f"\nResults: {passed} passed, {failed} failed, {passed + failed} total")
        if failed > 0:
            sys.exit(1)
        print("\nAll scenarios validated successfully!")
    finally:
        if server_proc is not None:
            server_proc.terminate()
            server_proc.wait(timeout=5)
            print("\nServer stopped.")


if __name__ == "__main__":
    main()
