"""Logging setup shared by the command line tools."""

import logging
from pathlib import Path


TRACE_LEVEL = 5  # Custom log level below DEBUG

# Register TRACE level
logging.addLevelName(TRACE_LEVEL, 'TRACE')

LOG_LEVELS = {
    'normal': logging.WARNING,
    'verbose': logging.INFO,
    'debug': logging.DEBUG,
    'trace': TRACE_LEVEL,
}


def level_from_flags(verbose: bool = False, debug: bool = False, trace: bool = False) -> str:
    if trace:
        return 'trace'
    if debug:
        return 'debug'
    if verbose:
        return 'verbose'
    return 'normal'


def setup_logging(level: str, output_dir: Path) -> None:
    """Configure logging."""
    # Ensure output dir exists
    output_dir.mkdir(parents=True, exist_ok=True)

    # File handler
    file_handler = logging.FileHandler(
        output_dir / 'datachat.log',
        mode='w',
        encoding='utf-8'
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(message)s'
    ))

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(LOG_LEVELS.get(level, logging.WARNING))
    console_handler.setFormatter(logging.Formatter('[%(levelname)s] %(message)s'))

    # Configure root logger
    logging.basicConfig(
        level=min(LOG_LEVELS.values()),
        handlers=[file_handler, console_handler]
    )
