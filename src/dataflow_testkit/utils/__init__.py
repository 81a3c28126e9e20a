"""DataFlow Test Kit Utilities."""

from .fs import create_temp_dir, delete_recursive
from .logging_utils import (
    configure_testkit_logging,
    get_testkit_logger,
    is_logging_configured,
    restore_testkit_logging,
    testkit_logging_context,
)

__all__ = [
    # Filesystem
    "create_temp_dir",
    "delete_recursive",
    # Logging utilities
    "configure_testkit_logging",
    "restore_testkit_logging",
    "is_logging_configured",
    "get_testkit_logger",
    "testkit_logging_context",
]
