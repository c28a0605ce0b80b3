"""
Utility modules and helper functions.
"""

from .logging import get_logger, get_recent_logs, setup_logging, shutdown_logging
from .validators import ChecksumValidator, ConfigValidator, DirectoryValidator, URLValidator

__all__ = [
    "get_logger", "get_recent_logs", "setup_logging", "shutdown_logging",
    "ChecksumValidator", "ConfigValidator", "DirectoryValidator", "URLValidator",
]
