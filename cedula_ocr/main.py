"""Application entry point for the cédula OCR API server."""

import argparse
import os
from pathlib import Path

import uvicorn

from cedula_ocr.api.app import app
from cedula_ocr.utils.config import CONFIG_ENV_VAR, load_config
from cedula_ocr.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


def main(argv: list[str] | None = None) -> None:
    """Start the FastAPI application server.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = argparse.ArgumentParser(description="Serve the cédula OCR API")
    parser.add_argument("--host", default="0.0.0.0", help="Bind address")
    parser.add_argument("--port", type=int, default=8000, help="Bind port")
    parser.add_argument(
        "-c", "--config", type=Path, help="YAML configuration file"
    )
    args = parser.parse_args(argv)

    if args.config is not None:
        os.environ[CONFIG_ENV_VAR] = str(args.config)

    config = load_config()
    setup_logging(config.log_level)
    logger.info("Serving cédula OCR API on %s:%d", args.host, args.port)
    uvicorn.run(app, host=args.host, port=args.port, log_config=None)


if __name__ == "__main__":
    main()
