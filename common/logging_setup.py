"""
common.logging_setup

Set up standard logging for the normalizer, pipeline and consumers.
"""
import logging

def setup_logging(level=logging.INFO):
    # accept "DEBUG" style names from the cli as well as logging constants
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )
