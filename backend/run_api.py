#!/usr/bin/env python
"""
Run the Mindcare API server.

Usage:
    python run_api.py
    python run_api.py --reload          # Development mode
    python run_api.py --memory          # In-memory backends, no Supabase needed
"""

import argparse
import os

import uvicorn

from shared.config import get_settings


def main():
    parser = argparse.ArgumentParser(description="Run Mindcare API server")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    parser.add_argument("--host", type=str, help="Host to bind to")
    parser.add_argument("--port", type=int, help="Port to bind to")
    parser.add_argument(
        "--memory",
        action="store_true",
        help="Use in-memory identity directory and document store",
    )
    args = parser.parse_args()

    if args.memory:
        # Read by Settings in the server process (and reload workers)
        os.environ["STORAGE_BACKEND"] = "memory"
        get_settings.cache_clear()

    settings = get_settings()

    uvicorn.run(
        "api.app:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=args.reload or settings.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
