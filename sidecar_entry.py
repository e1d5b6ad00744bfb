"""Sidecar entry point for the Name Hunter API.

Usage:
    python sidecar_entry.py --port 12345
"""

import argparse
import sys


def main() -> None:
    parser = argparse.ArgumentParser(description="Name Hunter backend sidecar")
    parser.add_argument("--port", type=int, default=8000, help="HTTP port")
    parser.add_argument("--host", type=str, default="127.0.0.1", help="bind address")
    parser.add_argument("--log-level", type=str, default="info")
    args = parser.parse_args()

    # PyInstaller frozen environment support
    if getattr(sys, "frozen", False):
        import multiprocessing

        multiprocessing.freeze_support()

    import uvicorn

    uvicorn.run(
        "name_hunter.api.main:app",
        host=args.host,
        port=args.port,
        log_level=args.log_level,
    )


if __name__ == "__main__":
    main()
