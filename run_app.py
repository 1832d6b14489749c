#!/usr/bin/env python3
"""
Simple runner script for the telemetry collection server.
This script ensures the correct Python path is set and runs the app.
"""

import argparse
import sys
from pathlib import Path

# Add the current directory to Python path
current_dir = Path(__file__).parent
sys.path.insert(0, str(current_dir))

from config_manager import get_app_config
from telemetry_pipeline.logging_config import setup_logging


def main():
    app_config = get_app_config()

    parser = argparse.ArgumentParser(description="Run the telemetry collection server")
    parser.add_argument("--host", default=app_config.host, help="Interface to bind")
    parser.add_argument("--port", type=int, default=app_config.port, help="Port to listen on")
    parser.add_argument("--debug", action="store_true", default=app_config.debug, help="Enable debug mode")
    args = parser.parse_args()

    setup_logging(debug=args.debug)

    # Import after logging is configured so startup messages are captured
    from app.main import app

    print("🚀 Starting telemetry collection server...")
    print(f"📁 Working directory: {current_dir}")

    app.run(
        host=args.host,
        port=args.port,
        debug=args.debug
    )


if __name__ == "__main__":
    main()
