"""
Logging utilities.
"""

from .logging_config import NOISY_LIBRARIES, NullHandler, setup_logging

__all__ = ["NOISY_LIBRARIES", "NullHandler", "setup_logging"]
