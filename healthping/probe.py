"""
Health probe for container/systemd health checks.

Exits 0 when the listener's /health endpoint reports healthy, 1 otherwise.
"""

import argparse
import sys

import httpx

DEFAULT_URL = "http://127.0.0.1:8081/health"
DEFAULT_TIMEOUT_S = 5.0


def check_health(url: str = DEFAULT_URL, timeout: float = DEFAULT_TIMEOUT_S) -> bool:
    """Return True when the endpoint answers 200 with status == healthy"""
    try:
        response = httpx.get(url, timeout=timeout)
    except httpx.HTTPError:
        return False

    if response.status_code != 200:
        return False

    try:
        data = response.json()
    except ValueError:
        return False

    return isinstance(data, dict) and data.get("status") == "healthy"


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="healthping-probe",
        description="Check a healthping listener's health endpoint",
    )
    parser.add_argument("--url", default=DEFAULT_URL, help=f"Health URL (default: {DEFAULT_URL})")
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT_S,
        help=f"Request timeout in seconds (default: {DEFAULT_TIMEOUT_S})",
    )
    args = parser.parse_args(argv)

    sys.exit(0 if check_health(args.url, args.timeout) else 1)


if __name__ == "__main__":
    main()
