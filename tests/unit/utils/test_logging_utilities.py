"""
Unit tests for test kit logging utilities.

Tests the logging utility functions for:
- configure_testkit_logging with various parameters
- restore_testkit_logging with state management
- get_testkit_logger helper function
- testkit_logging_context context manager
- LoggingConfig.from_env
"""

import logging
from unittest import mock

import pytest

from dataflow_testkit.core.logging_config import DEFAULT_LOG_FORMAT, LoggingConfig
from dataflow_testkit.utils import logging_utils


@pytest.mark.unit
class TestConfigureTestkitLogging:
    """Test the configure_testkit_logging function."""

    def setup_method(self):
        logging_utils.restore_testkit_logging()

    def teardown_method(self):
        logging_utils.restore_testkit_logging()

    def test_configure_with_config_object(self):
        """Should configure logging using LoggingConfig object."""
        logging_utils.configure_testkit_logging(LoggingConfig(level=logging.DEBUG))

        assert logging_utils.is_logging_configured() is True
        assert logging.getLogger("dataflow_testkit").level == logging.DEBUG

    def test_level_param_overrides_config(self):
        """Level parameter should override config.level."""
        config = LoggingConfig(level=logging.DEBUG)
        logging_utils.configure_testkit_logging(config=config, level=logging.CRITICAL)

        assert logging.getLogger("dataflow_testkit").level == logging.CRITICAL

    def test_per_logger_override(self):
        """Overrides in config.loggers apply to the named logger only."""
        config = LoggingConfig(
            level=logging.WARNING,
            loggers={"dataflow_testkit.core.fixture_manager": logging.DEBUG},
        )
        logging_utils.configure_testkit_logging(config)

        assert (
            logging.getLogger("dataflow_testkit.core.fixture_manager").level
            == logging.DEBUG
        )
        assert logging.getLogger("dataflow_testkit").level == logging.WARNING

    def test_propagation_disabled_when_false(self):
        logging_utils.configure_testkit_logging(LoggingConfig(propagate=False))

        assert logging.getLogger("dataflow_testkit").propagate is False

    def test_stream_handler_added_and_removed(self):
        root = logging.getLogger("dataflow_testkit")
        before = list(root.handlers)

        logging_utils.configure_testkit_logging(LoggingConfig(), stream_handler=True)
        assert len(root.handlers) == len(before) + 1

        logging_utils.restore_testkit_logging()
        assert root.handlers == before

    def test_uses_env_when_no_config(self):
        with mock.patch.dict("os.environ", {"DATAFLOW_TESTKIT_LOG_LEVEL": "INFO"}):
            logging_utils.configure_testkit_logging()

        assert logging.getLogger("dataflow_testkit").level == logging.INFO


@pytest.mark.unit
class TestRestoreTestkitLogging:
    """Test the restore_testkit_logging function."""

    def test_restores_original_level(self):
        logger = logging.getLogger("dataflow_testkit.core.local_service")
        original = logger.level

        logging_utils.configure_testkit_logging(level=logging.DEBUG)
        logging_utils.restore_testkit_logging()

        assert logger.level == original
        assert logging_utils.is_logging_configured() is False

    def test_safe_to_call_twice(self):
        logging_utils.restore_testkit_logging()
        logging_utils.restore_testkit_logging()

        assert logging_utils.is_logging_configured() is False


@pytest.mark.unit
class TestGetTestkitLogger:
    """Test the get_testkit_logger helper."""

    def test_prefixes_name(self):
        logger = logging_utils.get_testkit_logger("plugins")
        assert logger.name == "dataflow_testkit.plugins"

    def test_keeps_prefixed_name(self):
        logger = logging_utils.get_testkit_logger("dataflow_testkit.core")
        assert logger.name == "dataflow_testkit.core"

    @pytest.mark.parametrize("name", ["", "dataflow_testkit"])
    def test_root_logger(self, name):
        assert logging_utils.get_testkit_logger(name).name == "dataflow_testkit"


@pytest.mark.unit
class TestLoggingContext:
    """Test the testkit_logging_context context manager."""

    def test_applies_and_restores(self):
        logger = logging.getLogger("dataflow_testkit")
        original = logger.level

        with logging_utils.testkit_logging_context(level=logging.DEBUG):
            assert logger.level == logging.DEBUG

        assert logger.level == original

    def test_restores_on_exception(self):
        logger = logging.getLogger("dataflow_testkit")
        original = logger.level

        with pytest.raises(ValueError):
            with logging_utils.testkit_logging_context(level=logging.ERROR):
                raise ValueError("boom")

        assert logger.level == original

    def test_nested_in_configured_state(self):
        logging_utils.configure_testkit_logging(level=logging.INFO)
        try:
            with logging_utils.testkit_logging_context(level=logging.DEBUG):
                assert logging.getLogger("dataflow_testkit").level == logging.DEBUG
            assert logging_utils.is_logging_configured() is True
        finally:
            logging_utils.restore_testkit_logging()


@pytest.mark.unit
class TestLoggingConfigFromEnv:
    """Test LoggingConfig.from_env."""

    def test_defaults(self):
        with mock.patch.dict("os.environ", {}, clear=True):
            config = LoggingConfig.from_env()

        assert config.level == logging.WARNING
        assert config.format == DEFAULT_LOG_FORMAT

    def test_invalid_level_falls_back(self):
        with mock.patch.dict("os.environ", {"DATAFLOW_TESTKIT_LOG_LEVEL": "LOUD"}):
            config = LoggingConfig.from_env()

        assert config.level == logging.WARNING

    def test_custom_prefix(self):
        with mock.patch.dict("os.environ", {"MYKIT_LOG_LEVEL": "debug"}):
            config = LoggingConfig.from_env(prefix="MYKIT")

        assert config.level == logging.DEBUG

    def test_presets(self):
        assert LoggingConfig.development().level == logging.DEBUG
        assert LoggingConfig.production().level == logging.WARNING
        assert LoggingConfig.quiet().level == logging.ERROR
