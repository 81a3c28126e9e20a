"""
Configure test kit logging.

This module provides utilities to:
1. Configure test kit logging levels centrally
2. Support environment variable configuration
3. Provide a context manager for temporary logging configuration
4. Get properly prefixed loggers
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from ..core.logging_config import LoggingConfig

ROOT_LOGGER = "dataflow_testkit"

# Loggers configured alongside the root test kit logger
_MANAGED_LOGGERS = (
    ROOT_LOGGER,
    "dataflow_testkit.core.fixture_manager",
    "dataflow_testkit.core.local_service",
    "dataflow_testkit.testing",
    "dataflow_testkit.utils",
)

# Original logger state (level, propagate, handlers) for restore
_original_logger_state: Dict[str, Dict[str, Any]] = {}

_logging_configured: bool = False


def configure_testkit_logging(
    config: Optional[LoggingConfig] = None,
    level: Optional[int] = None,
    stream_handler: bool = False,
) -> None:
    """Configure test kit loggers.

    Args:
        config: LoggingConfig instance. If None, uses LoggingConfig.from_env().
        level: Explicit log level. Overrides config.level and per-logger overrides.
        stream_handler: Attach a StreamHandler using ``config.format`` to the
            root test kit logger.

    Usage:
        # Use environment variables
        configure_testkit_logging()

        # Trace every setup and teardown
        configure_testkit_logging(level=logging.DEBUG, stream_handler=True)
    """
    global _logging_configured

    if config is None:
        config = LoggingConfig.from_env()

    names = set(_MANAGED_LOGGERS) | set(config.loggers)
    for name in names:
        logger = logging.getLogger(name)
        if name not in _original_logger_state:
            _original_logger_state[name] = {
                "level": logger.level,
                "propagate": logger.propagate,
                "handlers": list(logger.handlers),
            }
        logger.setLevel(level if level is not None else config.get_level_for_logger(name))

    root = logging.getLogger(ROOT_LOGGER)
    root.propagate = config.propagate
    if stream_handler:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(config.format))
        root.addHandler(handler)

    _logging_configured = True
    root.debug(
        "Test kit logging configured: level=%s",
        logging.getLevelName(level if level is not None else config.level),
    )


def restore_testkit_logging() -> None:
    """Restore the logger state saved by configure_testkit_logging().

    Safe to call multiple times.
    """
    global _logging_configured

    for name, state in _original_logger_state.items():
        logger = logging.getLogger(name)
        logger.setLevel(state["level"])
        logger.propagate = state["propagate"]
        for handler in list(logger.handlers):
            if handler not in state["handlers"]:
                logger.removeHandler(handler)

    _original_logger_state.clear()
    _logging_configured = False


def is_logging_configured() -> bool:
    """Check if configure_testkit_logging() has been called."""
    return _logging_configured


def get_testkit_logger(name: str) -> logging.Logger:
    """Get a logger with the ``dataflow_testkit`` prefix.

    Usage:
        get_testkit_logger("plugins")  # logging.getLogger("dataflow_testkit.plugins")
        get_testkit_logger("")         # logging.getLogger("dataflow_testkit")
    """
    if not name or name == ROOT_LOGGER:
        return logging.getLogger(ROOT_LOGGER)
    if name.startswith(f"{ROOT_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


@contextmanager
def testkit_logging_context(
    config: Optional[LoggingConfig] = None,
    level: Optional[int] = None,
) -> Iterator[None]:
    """Apply a logging configuration for the duration of a block.

    The original configuration is restored on exit, even if an exception occurs.

    Usage:
        with testkit_logging_context(level=logging.DEBUG):
            manager.teardown(ctx)
    """
    global _original_logger_state, _logging_configured

    saved_state = _original_logger_state
    saved_configured = _logging_configured
    _original_logger_state = {}
    _logging_configured = False

    try:
        configure_testkit_logging(config=config, level=level)
        yield
    finally:
        restore_testkit_logging()
        _original_logger_state = saved_state
        _logging_configured = saved_configured
