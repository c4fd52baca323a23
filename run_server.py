#!/usr/bin/env python3
"""
Launch the rules engine API from repo root:

    python run_server.py

This launcher can:
- auto-select a free port if the requested one is taken
- start the FastAPI server
- open the interactive API docs in the browser
"""
from __future__ import annotations

import argparse
import logging
import socket
import sys
import threading
import webbrowser
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parent
SRC_DIR = REPO_ROOT / "src"


def _add_repo_paths() -> None:
    # Make the src/ packages importable when running from a checkout.
    src = str(SRC_DIR)
    if src not in sys.path:
        sys.path.insert(0, src)


def _browser_host(host: str) -> str:
    """Address to put in the docs URL; wildcard binds map to loopback."""
    return "127.0.0.1" if host in ("0.0.0.0", "::") else host


def find_available_port(host: str, start_port: int, *, max_tries: int = 50) -> tuple[int, bool]:
    """First port from ``start_port`` upward that ``host`` can bind.

    The flag is True when ``start_port`` itself was taken.
    """
    if max_tries < 1:
        raise ValueError("max_tries must be >= 1")

    failure: OSError | None = None
    for port in range(start_port, start_port + max_tries):
        try:
            with socket.create_server((host, port), reuse_port=False):
                return port, port != start_port
        except OSError as exc:
            failure = exc

    raise RuntimeError(
        f"No available port found in {start_port}..{start_port + max_tries - 1} on {host}"
        + (f" ({failure})" if failure is not None else "")
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="python run_server.py",
        description="Launch the rules engine API (pick a free port, run uvicorn, open the docs).",
    )
    parser.add_argument("--host", default="127.0.0.1", help="Host to listen on (default: %(default)s).")
    parser.add_argument("--port", type=int, default=8000, help="Starting port (default: %(default)s).")
    parser.add_argument("--reload", action="store_true", help="Enable uvicorn --reload.")
    parser.add_argument("--no-open", action="store_true", help="Skip opening the browser automatically.")
    parser.add_argument(
        "--log-level",
        default="info",
        choices=["debug", "info", "warning", "error"],
        help="Log level for the engine and server (default: %(default)s).",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        chosen_port, did_fallback = find_available_port(args.host, args.port, max_tries=50)
    except (ValueError, RuntimeError) as exc:
        print(f"[mest] Failed to select a free port: {exc}", file=sys.stderr)
        return 2

    url_host = _browser_host(args.host)
    url = f"http://{url_host}:{chosen_port}"
    if did_fallback:
        print(f"[mest] Serving on {url} (selected because {args.port} was in use).")
    else:
        print(f"[mest] Serving on {url}.")

    if not args.no_open:
        threading.Timer(1.0, webbrowser.open, args=(f"{url}/docs",)).start()

    _add_repo_paths()

    import uvicorn

    try:
        uvicorn.run(
            "mest_server.main:app",
            host=args.host,
            port=chosen_port,
            reload=args.reload,
            log_level=args.log_level,
        )
    except KeyboardInterrupt:
        return 0
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
