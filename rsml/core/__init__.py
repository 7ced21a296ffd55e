"""
RSML Core Module
================

Configuration shared by the engine and the command-line tools.
"""

from rsml.core.config import Config, ConfigError

__all__ = ["Config", "ConfigError"]
