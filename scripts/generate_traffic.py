#!/usr/bin/env python3
from __future__ import annotations

import argparse

import httpx

DEFAULT_PATHS = ("/", "/home", "/about", "/products", "/contact")


def send_requests(
    client: httpx.Client,
    base_url: str,
    *,
    count: int,
    paths: tuple[str, ...] = DEFAULT_PATHS,
) -> tuple[int, int]:
    """Send ``count`` requests cycling through ``paths``; return (recorded, failed)."""

    recorded = 0
    failed = 0
    root = base_url.rstrip("/")
    for index in range(count):
        path = paths[index % len(paths)]
        try:
            response = client.get(f"{root}{path}")
        except httpx.HTTPError:
            failed += 1
            continue
        if response.status_code == 200:
            recorded += 1
        else:
            failed += 1
    return recorded, failed


def fetch_recent(client: httpx.Client, base_url: str, stats_path: str = "/api/stats") -> list[dict]:
    response = client.get(f"{base_url.rstrip('/')}{stats_path}")
    response.raise_for_status()
    return response.json()


def main() -> int:
    parser = argparse.ArgumentParser(description="Send sample traffic to a DStats instance")
    parser.add_argument(
        "--base-url",
        default="http://localhost:8000",
        help="DStats base URL (default: http://localhost:8000)",
    )
    parser.add_argument("--count", type=int, default=25, help="Requests to send (default: 25)")
    parser.add_argument("--tail", type=int, default=5, help="Minutes of the series to print")
    args = parser.parse_args()

    print(f"Sending {args.count} requests to {args.base_url}...")
    with httpx.Client(timeout=10) as client:
        recorded, failed = send_requests(client, args.base_url, count=args.count)
        print(f"- recorded={recorded} failed={failed}")
        try:
            series = fetch_recent(client, args.base_url)
        except httpx.HTTPError as exc:
            print(f"- stats unavailable: {exc}")
            return 1

    for point in series[-args.tail:]:
        print(f"{point['time']}  {point['requests']}")
    return 0 if failed == 0 else 1


if __name__ == "__main__":
    raise SystemExit(main())
