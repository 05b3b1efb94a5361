"""Logging and console setup for CLI"""

import logging
import os
from rich.console import Console

import settings
from utils.debug_console import create_debug_console, setup_debug_logger

logger = logging.getLogger(__name__)


def setup_logging(debug: bool) -> Console:
    """
    Configure the root logger and return the console for user output

    Args:
        debug: Whether debug mode is enabled

    Returns:
        Console writing to stderr (debug-capturing when debug is enabled)
    """
    root_logger = logging.getLogger()

    # Clear existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if not debug:
        level = getattr(logging, str(settings.LOG_LEVEL).upper(), logging.WARNING)
        root_logger.setLevel(level)
        return Console(stderr=True)

    root_logger.setLevel(logging.DEBUG)

    log_file = os.path.abspath(settings.DEBUG_LOG_FILE)
    file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    # Library chatter is rarely useful even in debug mode
    for noisy in ("googleapiclient.discovery", "urllib3", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    debug_logger = setup_debug_logger(log_file)
    console = create_debug_console(debug_enabled=True, debug_logger=debug_logger, stderr=True)
    debug_logger.debug("[CLI] ===== CLI SESSION STARTED =====")

    logger.info(f"Debug logging enabled - appending to {log_file}")
    return console
