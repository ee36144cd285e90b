"""Utility functions and helpers for the PDF Report Pipeline.

This package provides logging and progress tracking utilities that integrate
with Hydra's configuration system and support unicode/emoji for user-friendly
terminal output.
"""

from .logging import log_error, log_item_start, setup_logging
from .progress import ProgressBar

__all__ = [
    "setup_logging",
    "log_item_start",
    "log_error",
    "ProgressBar",
]
