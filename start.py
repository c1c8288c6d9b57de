"""
Convenience launcher — starts the FocusFlow timer service.

Usage:
    python start.py
    python start.py --simulate     # also print an accelerated demo day first
"""

from __future__ import annotations

import argparse
import subprocess
import sys


def start_service() -> subprocess.Popen:
    return subprocess.Popen(
        [sys.executable, "-m", "focusflow.main"],
        stdout=sys.stdout,
        stderr=sys.stderr,
    )


def main() -> None:
    parser = argparse.ArgumentParser(description="Start the FocusFlow timer service")
    parser.add_argument("--simulate", action="store_true", help="Run the demo simulation first")
    args = parser.parse_args()

    if args.simulate:
        subprocess.run([sys.executable, "scripts/simulate.py"], check=False)

    print("Starting FocusFlow timer service…")
    proc = start_service()

    print("\nTimer API → http://127.0.0.1:8765/timer")
    print("Mirror WS → ws://127.0.0.1:8765/timer/ws")
    print("Press Ctrl+C to stop.\n")

    try:
        proc.wait()
    except KeyboardInterrupt:
        print("\nShutting down…")
        proc.terminate()
        proc.wait()


if __name__ == "__main__":
    main()
