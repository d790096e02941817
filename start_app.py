# start_app.py
"""Launch the API server."""

from __future__ import annotations

import argparse
import os
import sys

import uvicorn
from dotenv import load_dotenv

import config


def main(argv: list[str] | None = None) -> None:
    """Load settings, optionally pick the store backend, then start the API."""

    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--store",
        choices=[b.value for b in config.StoreBackend],
        help="Override STORE_BACKEND for this run",
    )
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", "8000")))
    args = parser.parse_args(argv)

    load_dotenv()  # load environment variables from a .env file
    if args.store:
        os.environ["STORE_BACKEND"] = args.store
        config.get_settings.cache_clear()

    settings = config.get_settings()
    if settings.store_backend == config.StoreBackend.MEMORY:
        print("using the in-memory store; data is lost on restart", file=sys.stderr)

    try:
        uvicorn.run(
            "api.app.main:app",
            host="0.0.0.0",  # nosec B104: bind for local development
            port=args.port,
            log_level=settings.log_level.lower(),
        )
    except ModuleNotFoundError as exc:
        missing = exc.name or str(exc)
        print(
            f"Missing dependency: {missing}. Install it with 'pip install {missing}'",
            file=sys.stderr,
        )
        raise SystemExit(1)


if __name__ == "__main__":
    main()
