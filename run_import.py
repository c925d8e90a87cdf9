#!/usr/bin/env python3
"""
ISK Import Report - Launcher

Usage:
    python run_import.py            # one sweep of UploadHere, then exit
    python run_import.py --serve    # HTTP trigger (POST /run) via uvicorn
"""
import argparse
import json
import sys
from pathlib import Path

# Allow running from a checkout without installing
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT / 'src'))


def main(argv=None):
    parser = argparse.ArgumentParser(description="ISK donation screenshot importer")
    parser.add_argument("--serve", action="store_true", help="serve the HTTP trigger instead of sweeping once")
    args = parser.parse_args(argv)

    from isk_import import config
    from isk_import.errors import ConfigurationError
    from isk_import.utils.logger import get_logger

    logger = get_logger()

    try:
        config.validate_config()
    except ConfigurationError as e:
        logger.critical(str(e), component="Main")
        return 2

    if args.serve:
        import uvicorn
        from isk_import.api.main import create_app

        logger.info(f"Serving on http://{config.API_HOST}:{config.API_PORT} (Swagger: /docs)", component="Main")
        uvicorn.run(create_app(), host=config.API_HOST, port=config.API_PORT, log_level="info")
        return 0

    from isk_import.orchestrator import run_once

    try:
        summary = run_once()
    except Exception as e:
        logger.critical(f"Sweep failed: {e}", component="Main", exc_info=True)
        return 1

    print(json.dumps(summary.to_dict(), indent=2))
    return 1 if summary.errored else 0


if __name__ == "__main__":
    sys.exit(main())
