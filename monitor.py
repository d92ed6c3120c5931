#!/usr/bin/env python3
"""Script de monitoring pour Listing Translator."""

import json
import os
import sys
from datetime import datetime

import httpx


def check_endpoint(url: str, name: str) -> tuple[bool, str]:
    """Vérifie un endpoint."""
    try:
        response = httpx.get(url, timeout=5)
        if response.status_code == 200:
            return True, f"✓ {name} OK"
        return False, f"✗ {name} returned {response.status_code}"
    except httpx.HTTPError as e:
        return False, f"✗ {name} error: {e}"


def print_json(url: str, title: str) -> None:
    try:
        response = httpx.get(url, timeout=5)
        if response.status_code == 200:
            print(f"{title}:")
            print(json.dumps(response.json(), indent=2))
        else:
            print(f"Could not get {title.lower()}: status {response.status_code}")
    except httpx.HTTPError as e:
        print(f"Could not get {title.lower()}: {e}")


def main() -> int:
    """Fonction principale."""
    print("=" * 60)
    print("   Listing Translator - Health Check")
    print("=" * 60)
    print(f"Time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print()

    base_url = os.getenv("LISTING_TRANSLATOR_URL", "http://localhost:8000").rstrip("/")
    all_ok = True

    endpoints = [
        (f"{base_url}/healthz", "Health Check"),
        (f"{base_url}/metrics", "Metrics"),
        (f"{base_url}/api/cache/status", "Translation Cache"),
    ]

    for url, name in endpoints:
        ok, msg = check_endpoint(url, name)
        print(msg)
        if not ok:
            all_ok = False

    print()

    # L'API répond même si le LLM est injoignable : on lit l'état détaillé
    try:
        health = httpx.get(f"{base_url}/healthz", timeout=10).json()
        print("Health Details:")
        print(json.dumps(health, indent=2))
        if not health.get("llm_available"):
            print("✗ LLM endpoint unreachable")
            all_ok = False
    except (httpx.HTTPError, ValueError) as e:
        print(f"Could not get health details: {e}")
        all_ok = False

    print()
    print_json(f"{base_url}/metrics", "Metrics")
    print()
    print_json(f"{base_url}/api/cache/status", "Cache Status")

    print()
    print("=" * 60)

    if all_ok:
        print("✓ All systems operational")
        return 0
    print("✗ Some systems are down")
    return 1


if __name__ == "__main__":
    sys.exit(main())
