"""Test kit settings.

Settings can be created directly, from environment variables, or via presets.

Environment Variables:
    DATAFLOW_TESTKIT_TEMP_ROOT: Parent directory for per-test temporary directories
    DATAFLOW_TESTKIT_URI_SCHEME: Scheme of generated instance addresses
    DATAFLOW_TESTKIT_KEEP_TEMP: Keep per-test directories after teardown (true/false)
    DATAFLOW_TESTKIT_LEAK_CHECK: Leak check mode (off/warn/strict)
    DATAFLOW_TESTKIT_GC: Run a garbage collection after teardown (true/false)

Usage:
    from dataflow_testkit.core.config import TestkitSettings

    settings = TestkitSettings.from_env()
    strict = TestkitSettings(leak_check="strict")
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .identity import DEFAULT_URI_SCHEME, is_valid_scheme

logger = logging.getLogger(__name__)

LEAK_CHECK_OFF = "off"
LEAK_CHECK_WARN = "warn"
LEAK_CHECK_STRICT = "strict"
LEAK_CHECK_MODES = (LEAK_CHECK_OFF, LEAK_CHECK_WARN, LEAK_CHECK_STRICT)


@dataclass
class TestkitSettings:
    """Settings shared by every context a FixtureManager sets up.

    Attributes:
        temp_root: Parent of the per-test temporary directories. ``None`` uses
            the system temporary directory.
        uri_scheme: Scheme of the generated instance addresses.
        keep_temp_dirs: Leave per-test directories on disk after teardown.
        leak_check: What to do when handles are still open after teardown:
            ``off`` ignores them, ``warn`` logs them, ``strict`` fails teardown.
        gc_after_teardown: Run ``gc.collect()`` after teardown so finalizers of
            leaked resources fire while the test is still attributable.
    """

    __test__ = False

    temp_root: Optional[Path] = None
    uri_scheme: str = DEFAULT_URI_SCHEME
    keep_temp_dirs: bool = False
    leak_check: str = LEAK_CHECK_WARN
    gc_after_teardown: bool = True

    def __post_init__(self) -> None:
        if self.temp_root is not None:
            self.temp_root = Path(self.temp_root)
        if self.leak_check not in LEAK_CHECK_MODES:
            raise ValueError(
                f"leak_check must be one of {LEAK_CHECK_MODES}, got {self.leak_check!r}"
            )
        if not is_valid_scheme(self.uri_scheme):
            raise ValueError(
                f"uri_scheme must be a valid URI scheme, got {self.uri_scheme!r}"
            )

    @classmethod
    def from_env(cls, prefix: str = "DATAFLOW_TESTKIT") -> "TestkitSettings":
        """Create settings from environment variables.

        Invalid values are logged and replaced by the defaults.

        Args:
            prefix: Environment variable prefix (default: DATAFLOW_TESTKIT)

        Returns:
            TestkitSettings configured from the environment.
        """

        def parse_bool(name: str, default: bool) -> bool:
            value = os.getenv(f"{prefix}_{name}")
            if value is None:
                return default
            normalized = value.lower().strip()
            if normalized in ("true", "1", "yes", "on"):
                return True
            if normalized in ("false", "0", "no", "off"):
                return False
            logger.warning(
                "Invalid boolean '%s' for %s_%s, using default", value, prefix, name
            )
            return default

        leak_check = os.getenv(f"{prefix}_LEAK_CHECK", LEAK_CHECK_WARN).lower().strip()
        if leak_check not in LEAK_CHECK_MODES:
            logger.warning("Invalid leak check mode '%s', using default", leak_check)
            leak_check = LEAK_CHECK_WARN

        uri_scheme = os.getenv(f"{prefix}_URI_SCHEME") or DEFAULT_URI_SCHEME
        if not is_valid_scheme(uri_scheme):
            logger.warning("Invalid URI scheme '%s', using default", uri_scheme)
            uri_scheme = DEFAULT_URI_SCHEME

        temp_root = os.getenv(f"{prefix}_TEMP_ROOT") or None

        return cls(
            temp_root=Path(temp_root) if temp_root else None,
            uri_scheme=uri_scheme,
            keep_temp_dirs=parse_bool("KEEP_TEMP", False),
            leak_check=leak_check,
            gc_after_teardown=parse_bool("GC", True),
        )

    @classmethod
    def strict(cls) -> "TestkitSettings":
        """Settings that fail teardown on leaked handles."""
        return cls(leak_check=LEAK_CHECK_STRICT)

    @classmethod
    def debug(cls) -> "TestkitSettings":
        """Settings that keep temporary directories around for inspection."""
        return cls(keep_temp_dirs=True, leak_check=LEAK_CHECK_WARN)
