#!/usr/bin/env python3
"""
Smoke test for a running Token Orchestrator
"""
import os
import sys

import requests

BASE_URL = os.getenv("BASE_URL", "http://127.0.0.1:3000").rstrip("/")


def check(label, response, expected_status, expected_json=None):
    """Compare a response against the expected status and body keys"""
    if response.status_code != expected_status:
        print(f"❌ {label}: expected status {expected_status}, got {response.status_code}")
        return False
    if expected_json:
        data = response.json()
        for key, expected_value in expected_json.items():
            if key not in data:
                print(f"❌ {label}: missing key '{key}' in response")
                return False
            if expected_value is not None and data[key] != expected_value:
                print(f"❌ {label}: expected {key}={expected_value}, got {data[key]}")
                return False
    print(f"✅ {label}: status {response.status_code}")
    return True


def main():
    """Walk one key through its lifecycle"""
    print("🚀 Running smoke tests against", BASE_URL)
    s = requests.Session()
    results = []

    try:
        r = s.post(f"{BASE_URL}/keys", timeout=5)
        results.append(check("create", r, 201, {"keyId": None}))
        key_id = r.json()["keyId"]

        results.append(check("fetch", s.get(f"{BASE_URL}/keys/{key_id}", timeout=5), 200, {"keyId": key_id}))
        results.append(check("info", s.get(f"{BASE_URL}/keys/{key_id}/info", timeout=5), 200, {"expiresAt": "never"}))
        results.append(check("keep-alive", s.put(f"{BASE_URL}/keys/{key_id}/alive", timeout=5), 200))
        results.append(check("block", s.put(f"{BASE_URL}/keys/{key_id}", json={"blocked": True}, timeout=5), 200))
        results.append(check("fetch blocked", s.get(f"{BASE_URL}/keys/{key_id}", timeout=5), 403))
        results.append(check("bad flag", s.put(f"{BASE_URL}/keys/{key_id}", json={"blocked": "yes"}, timeout=5), 400))
        results.append(check("unblock", s.put(f"{BASE_URL}/keys/{key_id}", json={"blocked": False}, timeout=5), 200))
        results.append(check("delete", s.delete(f"{BASE_URL}/keys/{key_id}", timeout=5), 200))
        results.append(check("delete again", s.delete(f"{BASE_URL}/keys/{key_id}", timeout=5), 404))
        results.append(check("healthz", s.get(f"{BASE_URL}/healthz", timeout=5), 200, {"status": "ok"}))
    except requests.RequestException as e:
        print(f"❌ request failed: {e}")
        sys.exit(1)

    failed = results.count(False)
    if failed > 0:
        print(f"\n❌ {failed} check(s) failed")
        sys.exit(1)
    else:
        print("\n✅ All smoke tests passed")


if __name__ == "__main__":
    main()
