"""Logging configuration for the DataFlow test kit.

Environment Variables:
    DATAFLOW_TESTKIT_LOG_LEVEL: Log level of the test kit loggers (DEBUG/INFO/WARNING/ERROR)
    DATAFLOW_TESTKIT_LOG_FORMAT: Log format string

Usage:
    from dataflow_testkit.core.logging_config import LoggingConfig

    config = LoggingConfig.from_env()
    config = LoggingConfig.development()
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, Optional

# Default log format
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class LoggingConfig:
    """Logging configuration for the test kit loggers.

    Attributes:
        level: Level of the ``dataflow_testkit`` logger (default: WARNING)
        format: Log format string, used when a handler is attached
        loggers: Dict of logger name to level overrides
        propagate: Whether to propagate logs to parent loggers

    Usage:
        # Trace instance provisioning and teardown
        config = LoggingConfig(
            level=logging.WARNING,
            loggers={"dataflow_testkit.core.fixture_manager": logging.DEBUG},
        )
    """

    level: int = logging.WARNING
    format: str = DEFAULT_LOG_FORMAT
    loggers: Dict[str, int] = field(default_factory=dict)
    propagate: bool = True

    def get_level_for_logger(self, name: str) -> int:
        """Level for ``name``: its override if set, the global level otherwise."""
        return self.loggers.get(name, self.level)

    @classmethod
    def from_env(cls, prefix: str = "DATAFLOW_TESTKIT") -> "LoggingConfig":
        """Create configuration from environment variables.

        Args:
            prefix: Environment variable prefix (default: DATAFLOW_TESTKIT)

        Returns:
            LoggingConfig instance configured from environment.
        """

        def parse_level(value: Optional[str], default: int) -> int:
            if value is None:
                return default
            level = getattr(logging, value.upper().strip(), None)
            if not isinstance(level, int):
                logging.getLogger(__name__).warning(
                    f"Invalid log level '{value}', using default"
                )
                return default
            return level

        return cls(
            level=parse_level(os.getenv(f"{prefix}_LOG_LEVEL"), logging.WARNING),
            format=os.getenv(f"{prefix}_LOG_FORMAT", DEFAULT_LOG_FORMAT),
        )

    @classmethod
    def production(cls) -> "LoggingConfig":
        return cls(level=logging.WARNING)

    @classmethod
    def development(cls) -> "LoggingConfig":
        return cls(level=logging.DEBUG)

    @classmethod
    def quiet(cls) -> "LoggingConfig":
        return cls(level=logging.ERROR)
