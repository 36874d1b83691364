"""Request a tutor summary from a running Mentor Assistant backend.

Usage:
    python scripts/invoke.py MENTOR_ID TUTOR_ID                  # scorecard summary
    python scripts/invoke.py MENTOR_ID TUTOR_ID --patterns       # patterns/suggestions
    python scripts/invoke.py MENTOR_ID TUTOR_ID --key scores     # show only one key

Required environment variables:
    MENTOR_ASSISTANT_ID_TOKEN  – Firebase ID token of the mentor (or mock-<uid> in MOCK_MODE)

Optional:
    MENTOR_ASSISTANT_URL       – defaults to http://localhost:3000
"""
from __future__ import annotations

import argparse
import json
import os
import sys
import time

import requests


def get_config() -> tuple[str, str]:
    token = os.environ.get("MENTOR_ASSISTANT_ID_TOKEN", "")
    if not token:
        print("ERROR: MENTOR_ASSISTANT_ID_TOKEN env var is required.")
        sys.exit(1)
    base_url = os.environ.get("MENTOR_ASSISTANT_URL", "http://localhost:3000").rstrip("/")
    return base_url, token


def invoke(base_url: str, token: str, mentor_id: str, tutor_id: str,
           patterns: bool = False, filter_key: str | None = None) -> None:
    path = f"/summary/{mentor_id}/{tutor_id}" + ("/patterns" if patterns else "")
    t0 = time.time()
    r = requests.get(f"{base_url}{path}", headers={"Authorization": f"Bearer {token}"}, timeout=120)
    elapsed = round(time.time() - t0, 1)

    print(f"HTTP {r.status_code} [{elapsed}s] correlation_id={r.headers.get('X-Correlation-ID', '-')}")
    if r.headers.get("X-Schema-Valid") == "false":
        print("WARNING: response did not match the output schema")

    try:
        data = r.json()
    except json.JSONDecodeError:
        print(r.text)
        sys.exit(1)

    if filter_key:
        data = data.get(filter_key)
    print(json.dumps(data, indent=2))
    if r.status_code != 200:
        sys.exit(1)


def main():
    parser = argparse.ArgumentParser(description="Request a tutor summary")
    parser.add_argument("mentor_id")
    parser.add_argument("tutor_id")
    parser.add_argument("--patterns", action="store_true", help="Use the patterns/suggestions format")
    parser.add_argument("--key", help="Print only this top-level key of the response")
    args = parser.parse_args()

    base_url, token = get_config()
    invoke(base_url, token, args.mentor_id, args.tutor_id, args.patterns, args.key)


if __name__ == "__main__":
    main()
