"""Main entry point for Chara Inspector."""

import logging
import sys
import io
from pathlib import Path

import uvicorn


def setup_logging(debug: bool = False):
    """Configure logging."""
    level = logging.DEBUG if debug else logging.INFO

    # Force UTF-8 encoding for stdout/stderr on Windows
    if sys.platform == 'win32':
        sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding='utf-8', errors='replace')
        sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding='utf-8', errors='replace')

    handlers = [logging.StreamHandler(sys.stdout)]

    file_handler = None
    log_file = None

    # Add file handler if debug mode is enabled
    if debug:
        from datetime import datetime
        log_dir = Path("data/debug_logs/server")
        log_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_dir / f"server_{timestamp}.log"

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        handlers.append(file_handler)

    # Root stays at INFO to keep library logs quiet
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True
    )

    app_logger = logging.getLogger('chara_inspector')
    app_logger.setLevel(level)

    logging.getLogger('httpcore').setLevel(logging.WARNING)
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('PIL').setLevel(logging.WARNING)

    startup_logger = logging.getLogger(__name__)
    if debug:
        startup_logger.info(f"[STARTUP] Server log file: {log_file}")
    startup_logger.info(f"[STARTUP] Logging configured: level={level}, chara_inspector logger level={app_logger.level}")

    return file_handler, log_file


def main():
    """Run the FastAPI server."""
    from chara_inspector.config import ConfigLoader, SystemConfig
    try:
        system_config = ConfigLoader().load_system_config()
    except Exception as e:
        # Logging isn't configured yet
        logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        logging.getLogger(__name__).warning(f"[STARTUP WARNING] Could not load system config: {e}, using defaults")
        system_config = SystemConfig()

    setup_logging(debug=system_config.debug)

    logger = logging.getLogger(__name__)
    logger.info(f"Starting Chara Inspector server (debug mode: {system_config.debug})...")
    logger.info(f"Server will listen on {system_config.api_host}:{system_config.api_port}")

    uvicorn.run(
        "chara_inspector.api.app:app",
        host=system_config.api_host,
        port=system_config.api_port,
        reload=False,
        log_level="info",
        log_config=None,  # Keep our basicConfig
    )


if __name__ == "__main__":
    main()
