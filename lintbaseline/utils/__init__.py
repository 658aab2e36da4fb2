"""Utility modules for logging and path handling."""

from lintbaseline.utils.logging import ComponentLogger, get_logger, setup_logging
from lintbaseline.utils.paths import to_relative_path

__all__ = ["setup_logging", "ComponentLogger", "get_logger", "to_relative_path"]
