#!/usr/bin/env python3
"""Development scripts for the Cinema Booking Platform."""

import subprocess
import sys


def start():
    """Start the development server."""
    subprocess.run([
        "uvicorn",
        "cinema_booking_platform.main:app",
        "--host", "0.0.0.0",
        "--port", "3000",
        "--reload"
    ])


def test():
    """Run the test suite."""
    result = subprocess.run(["pytest", "tests/"])
    sys.exit(result.returncode)


def lint():
    """Run linting and type checking."""
    subprocess.run(["black", "--check", "cinema_booking_platform/", "tests/"])
    subprocess.run(["mypy", "cinema_booking_platform/"])


def format_code():
    """Format code with black."""
    subprocess.run(["black", "cinema_booking_platform/", "tests/"])


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python scripts.py <command>")
        print("Commands: start, test, lint, format-code")
        sys.exit(1)

    command = sys.argv[1].replace("-", "_")
    if hasattr(sys.modules[__name__], command):
        getattr(sys.modules[__name__], command)()
    else:
        print(f"Unknown command: {sys.argv[1]}")
        sys.exit(1)
