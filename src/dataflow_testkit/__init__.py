"""
DataFlow Test Kit - per-test service instances

Gives every test its own freshly provisioned, uniquely addressed service
instances and releases all of them, together with their local files, when the
test finishes:

- core/fixture_manager.py: FixtureManager and TestContext lifecycle
- core/identity.py: test identifiers and instance addresses
- core/local_service.py: SQLite-backed local service client
- core/config.py: TestkitSettings
- testing/pytest_plugin.py: pytest fixtures
- testing/unittest_support.py: unittest base class
"""

from .core.config import TestkitSettings
from .core.errors import (
    InstanceURIError,
    LeakError,
    ProvisioningError,
    StateError,
    TeardownError,
    TestkitError,
)
from .core.fixture_manager import FixtureManager, TeardownReport, TestContext
from .core.identity import InstanceURI, make_instance_uri, make_test_id
from .core.local_service import LocalInstance, LocalServiceClient
from .core.logging_config import LoggingConfig
from .core.runtime_config import RuntimeConfig
from .core.service import InstanceHandle, ServiceClient
from .utils.logging_utils import (
    configure_testkit_logging,
    get_testkit_logger,
    is_logging_configured,
    restore_testkit_logging,
    testkit_logging_context,
)

__version__ = "0.1.0"

__all__ = [
    "FixtureManager",
    "TestContext",
    "TeardownReport",
    "TestkitSettings",
    "RuntimeConfig",
    "InstanceURI",
    "make_test_id",
    "make_instance_uri",
    "ServiceClient",
    "InstanceHandle",
    "LocalServiceClient",
    "LocalInstance",
    "TestkitError",
    "ProvisioningError",
    "StateError",
    "TeardownError",
    "LeakError",
    "InstanceURIError",
    "LoggingConfig",
    "configure_testkit_logging",
    "restore_testkit_logging",
    "is_logging_configured",
    "get_testkit_logger",
    "testkit_logging_context",
]
