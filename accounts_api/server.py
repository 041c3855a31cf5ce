"""
Run the Accounts API with uvicorn on the configured listen address:

  python -m accounts_api.server
  python -m accounts_api.server --port 9000 --reload
"""

import argparse

import uvicorn

from accounts_api.core.config import get_settings


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the Accounts API server")
    parser.add_argument("--host", type=str, help="Host to bind to (default: HOST)")
    parser.add_argument("--port", type=int, help="Port to bind to (default: PORT)")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    args = parser.parse_args()

    settings = get_settings()
    uvicorn.run(
        "accounts_api.main:app",
        host=args.host or settings.HOST,
        port=args.port or settings.PORT,
        reload=args.reload,
    )


if __name__ == "__main__":
    main()
