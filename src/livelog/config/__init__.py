"""
Configuration module for the live log writers and event stream.
"""

from .livelog_config import LiveLogConfig, get_config

__all__ = ["LiveLogConfig", "get_config"]
