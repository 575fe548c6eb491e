# utils.py
"""
Utility functions for the galaxy generator.

This module provides helpers that are used across the application but do
not belong to a specific domain like generation or rendering: logging
setup, configuration loading and color conversion.
"""
import logging
import logging.handlers
import json
import os
import re
from typing import Dict, Any, Tuple

# --- Data Contracts ---
#
# setup_logging(config: Dict[str, Any]) -> None:
#   - Inputs:
#     - config: A dictionary with an optional "logging" key holding
#       "level", "format", "log_file" and "max_bytes"/"backup_count".
#   - Outputs: None
#   - Side Effects: Configures the root Python logger. Creates the log
#     directory if it doesn't exist. Installs a console handler and a
#     rotating file handler.
#
# load_config(path: str) -> Dict[str, Any]:
#   - Raises FileNotFoundError / json.JSONDecodeError after logging them.
#
# hex_to_rgb(value: str) -> Tuple[float, float, float]:
#   - Inputs: "#rrggbb" or "#rgb" (leading '#' optional).
#   - Outputs: channels as floats in [0, 1].
#   - Raises ValueError on malformed input.

DEFAULT_LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'
DEFAULT_LOG_FILE = 'logs/galaxy.log'

_HEX_COLOR = re.compile(r'^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$')


def setup_logging(config: Dict[str, Any]) -> None:
    """
    Configures the logging system from a configuration dictionary.

    Logs go to the console and to a rotating file.
    """
    log_config = config.get('logging', {})
    log_level = log_config.get('level', 'INFO').upper()
    log_format = log_config.get('format', DEFAULT_LOG_FORMAT)
    log_file_path = log_config.get('log_file', DEFAULT_LOG_FILE)
    max_bytes = log_config.get('max_bytes', 1024 * 1024)
    backup_count = log_config.get('backup_count', 5)

    logger = logging.getLogger()
    logger.setLevel(log_level)

    # Drop handlers from a previous setup so messages are not duplicated
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(log_format)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file_path:
        log_dir = os.path.dirname(log_file_path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file_path, maxBytes=max_bytes, backupCount=backup_count
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logging.info("Logging system initialized.")
    logging.debug(f"Log level set to {log_level}.")
    logging.debug(f"Log file path: {log_file_path or '(console only)'}")


def load_config(path: str) -> Dict[str, Any]:
    """Loads a JSON configuration file."""
    logging.info(f"Loading configuration from {path}...")
    try:
        with open(path, 'r') as f:
            config = json.load(f)
        logging.info("Configuration loaded successfully.")
        return config
    except FileNotFoundError:
        logging.error(f"Configuration file not found at {path}.")
        raise
    except json.JSONDecodeError:
        logging.error(f"Error decoding JSON from {path}.")
        raise


def hex_to_rgb(value: str) -> Tuple[float, float, float]:
    """Converts a hex color string to an (r, g, b) tuple of floats in [0, 1]."""
    match = _HEX_COLOR.match(value.strip()) if isinstance(value, str) else None
    if match is None:
        raise ValueError(f"Invalid hex color: {value!r}. Expected '#rrggbb'.")
    digits = match.group(1)
    if len(digits) == 3:
        digits = ''.join(ch * 2 for ch in digits)
    return tuple(int(digits[i:i + 2], 16) / 255.0 for i in (0, 2, 4))


def rgb_to_hex(rgb) -> str:
    """Converts an (r, g, b) tuple of floats in [0, 1] to '#rrggbb'."""
    channels = [min(255, max(0, int(round(c * 255)))) for c in rgb]
    return '#{:02x}{:02x}{:02x}'.format(*channels)
