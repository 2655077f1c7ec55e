import argparse

import uvicorn

from stockpick.config import get_settings


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Run the stockpick API server.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--reload", action="store_true", help="Restart on code changes (development only).")
    return parser.parse_args(argv)


def main(argv=None) -> None:
    args = parse_args(argv)
    settings = get_settings()
    uvicorn.run(
        "stockpick.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.LOG_LEVEL.lower(),
        # Logging is configured by stockpick.core.logging.setup_logging.
        log_config=None,
    )


if __name__ == "__main__":
    main()
