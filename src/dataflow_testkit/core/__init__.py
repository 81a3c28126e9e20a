"""DataFlow Test Kit Core Components."""

from .config import LEAK_CHECK_MODES, TestkitSettings
from .errors import (
    InstanceURIError,
    LeakError,
    ProvisioningError,
    StateError,
    TeardownError,
    TestkitError,
)
from .fixture_manager import FixtureManager, TeardownReport, TestContext
from .identity import InstanceURI, make_instance_uri, make_test_id
from .local_service import LocalInstance, LocalServiceClient
from .logging_config import LoggingConfig
from .runtime_config import RuntimeConfig
from .service import InstanceHandle, ServiceClient

__all__ = [
    "FixtureManager",
    "TestContext",
    "TeardownReport",
    "TestkitSettings",
    "LEAK_CHECK_MODES",
    "RuntimeConfig",
    "LoggingConfig",
    # Identity
    "InstanceURI",
    "make_test_id",
    "make_instance_uri",
    # Service interfaces and the bundled local service
    "ServiceClient",
    "InstanceHandle",
    "LocalServiceClient",
    "LocalInstance",
    # Errors
    "TestkitError",
    "ProvisioningError",
    "StateError",
    "TeardownError",
    "LeakError",
    "InstanceURIError",
]
