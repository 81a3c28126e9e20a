"""Per-test fixture manager for service instances.

Every test gets its own ``TestContext``: a unique identifier, an exclusively
owned temporary directory, a runtime configuration pointing the service at
that directory, and the list of instances opened during the test. Teardown
releases and uninstalls every instance, deletes the directory, and reports
all failures together once every step has been attempted.

Example:
    manager = FixtureManager(LocalServiceClient())
    ctx = manager.setup("tests.test_users.TestUsers", "test_create")
    try:
        db = manager.get_default_instance(ctx)
        other = manager.create_instance(ctx)
        ...
    finally:
        manager.teardown(ctx)
"""

import gc
import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, List, Optional, Tuple

from ..utils.fs import create_temp_dir, delete_recursive
from .config import LEAK_CHECK_OFF, LEAK_CHECK_STRICT, TestkitSettings
from .errors import LeakError, ProvisioningError, StateError, TeardownError
from .identity import InstanceURI, make_instance_uri, make_test_id
from .runtime_config import RuntimeConfig
from .service import InstanceHandle, ServiceClient

logger = logging.getLogger(__name__)


def _is_closed(handle: Any) -> bool:
    """Handles that cannot report their state are not counted as leaks."""
    return bool(getattr(handle, "closed", True))


@dataclass
class TeardownReport:
    """Outcome of tearing down one context.

    Attributes:
        test_id: Identifier of the torn-down test.
        released: Handles whose release succeeded, in creation order.
        uninstalled: Addresses uninstalled successfully.
        issued: Every handle the context handed out.
        unreleased: Issued handles that do not report a closed state.
    """

    test_id: str
    released: List[Any] = field(default_factory=list)
    uninstalled: List[InstanceURI] = field(default_factory=list)
    issued: List[Any] = field(default_factory=list)
    unreleased: List[Any] = field(default_factory=list)

    @property
    def has_leaks(self) -> bool:
        return bool(self.unreleased)

    def assert_no_leaks(self) -> None:
        """Raise LeakError if any handle is still open."""
        if self.unreleased:
            raise LeakError(
                f"{len(self.unreleased)} handle(s) still open after teardown of "
                f"'{self.test_id}': {self.unreleased!r}",
                handles=self.unreleased,
            )


class TestContext:
    """State of one test execution.

    Fields are only meaningful between ``FixtureManager.setup`` and
    ``FixtureManager.teardown``; accessors raise StateError otherwise.
    """

    __test__ = False

    def __init__(
        self,
        manager: "FixtureManager",
        test_id: str,
        temp_dir: Path,
        runtime_config: RuntimeConfig,
    ):
        self._manager = manager
        self._test_id: Optional[str] = test_id
        self._temp_dir: Optional[Path] = temp_dir
        self._runtime_config: Optional[RuntimeConfig] = runtime_config

        # Guards the counter, the tracked handles and the orphaned addresses.
        self._lock = threading.Lock()
        # Guards check-and-create of the default instance.
        self._default_lock = threading.Lock()

        self._instance_counter = 0
        # (address, handle) pairs, in creation order.
        self._instances: List[Tuple[InstanceURI, InstanceHandle]] = []
        self._orphaned: List[InstanceURI] = []
        self._issued: List[InstanceHandle] = []
        self._default_instance: Optional[InstanceHandle] = None

    @property
    def is_active(self) -> bool:
        return self._test_id is not None

    def _require_active(self, operation: str) -> None:
        if self._test_id is None:
            raise StateError(
                f"Cannot {operation}: test context is not set up or already torn down"
            )

    @property
    def test_id(self) -> str:
        self._require_active("get test id")
        return self._test_id

    @property
    def temp_dir(self) -> Path:
        self._require_active("get temporary directory")
        return self._temp_dir

    @property
    def runtime_config(self) -> RuntimeConfig:
        self._require_active("get runtime configuration")
        return self._runtime_config

    @property
    def instance_count(self) -> int:
        """Number of sequence numbers consumed so far, failed attempts included."""
        with self._lock:
            return self._instance_counter

    @property
    def instances(self) -> List[InstanceHandle]:
        """Snapshot of the tracked handles, in creation order."""
        with self._lock:
            return [handle for _, handle in self._instances]

    def _next_sequence(self) -> int:
        with self._lock:
            sequence = self._instance_counter
            self._instance_counter += 1
            return sequence

    # Shortcuts so test bodies only need the context.

    def create_instance(self) -> InstanceHandle:
        return self._manager.create_instance(self)

    def get_default_instance(self) -> InstanceHandle:
        return self._manager.get_default_instance(self)

    def __repr__(self) -> str:
        state = "active" if self.is_active else "torn down"
        return f"TestContext({self._test_id!r}, {state})"


LeakListener = Callable[[TeardownReport], None]


class FixtureManager:
    """Sets up, provisions and tears down per-test contexts.

    A manager holds no per-test state, so one manager may serve many contexts
    concurrently (e.g. a session-wide manager used by parallel tests).

    Attributes:
        client: Service client used to install, open and uninstall instances.
        settings: Test kit settings.
    """

    def __init__(
        self, client: ServiceClient, settings: Optional[TestkitSettings] = None
    ):
        self.client = client
        self.settings = settings or TestkitSettings()
        self._leak_listeners: List[LeakListener] = []

    def add_leak_listener(self, listener: LeakListener) -> None:
        """Register a callback receiving the report of every teardown."""
        self._leak_listeners.append(listener)

    def remove_leak_listener(self, listener: LeakListener) -> None:
        self._leak_listeners.remove(listener)

    def setup(self, test_class_name: str, test_method_name: str) -> TestContext:
        """Create the context of a test; no instance is provisioned yet.

        Args:
            test_class_name: Fully-qualified name of the test class or module.
            test_method_name: Name of the test method.

        Returns:
            The new TestContext.

        Raises:
            ProvisioningError: If either name is empty or the temporary
                directory cannot be created.
        """
        try:
            test_id = make_test_id(test_class_name, test_method_name)
        except ValueError as e:
            raise ProvisioningError(f"Cannot set up test context: {e}") from e
        try:
            temp_dir = create_temp_dir(
                test_id, "temp-dir", parent=self.settings.temp_root
            )
        except OSError as e:
            raise ProvisioningError(
                f"Cannot create temporary directory for '{test_id}': {e}"
            ) from e

        config = RuntimeConfig.local(temp_dir)
        logger.debug("Set up test context %s in %s", test_id, temp_dir)
        return TestContext(self, test_id, temp_dir, config)

    def create_instance(self, ctx: TestContext) -> InstanceHandle:
        """Install and open a fresh instance, tracked for teardown.

        Raises:
            StateError: If the context is not set up or already torn down, or
                is torn down while the instance is being opened. The new
                instance is then released and uninstalled before raising.
            ProvisioningError: If the address cannot be derived, or install
                or open fails. The sequence number used by the failed attempt
                is not reused.
        """
        with ctx._lock:
            ctx._require_active("create instance")
            test_id = ctx._test_id
            config = ctx._runtime_config
        sequence = ctx._next_sequence()

        try:
            uri = make_instance_uri(test_id, sequence, scheme=self.settings.uri_scheme)
        except ValueError as e:
            raise ProvisioningError(
                f"Cannot derive address of instance {sequence} for '{test_id}': {e}"
            ) from e

        try:
            self.client.install(uri, config)
        except Exception as e:
            raise ProvisioningError(
                f"Failed to install instance {uri}: {e}", address=str(uri)
            ) from e

        try:
            handle = self.client.open(uri, config)
        except Exception as e:
            # Installed but never opened: teardown still has to uninstall it.
            with ctx._lock:
                torn_down = not ctx.is_active
                if not torn_down:
                    ctx._orphaned.append(uri)
            if torn_down:
                self._discard(test_id, uri, None, config)
            raise ProvisioningError(
                f"Failed to open instance {uri}: {e}", address=str(uri)
            ) from e

        with ctx._lock:
            torn_down = not ctx.is_active
            if not torn_down:
                ctx._instances.append((uri, handle))
                ctx._issued.append(handle)
        if torn_down:
            errors = self._discard(test_id, uri, handle, config)
            raise StateError(
                f"Instance {uri} was opened after '{test_id}' was torn down; "
                "it has been released and uninstalled"
            ) from (TeardownError(test_id, errors) if errors else None)
        logger.debug("Created instance %s for %s", uri, test_id)
        return handle

    def _discard(
        self,
        test_id: str,
        uri: InstanceURI,
        handle: Optional[InstanceHandle],
        config: RuntimeConfig,
    ) -> List[Tuple[str, BaseException]]:
        """Release and uninstall an instance created after its context was torn down.

        Returns:
            The ``(step, exception)`` pairs of the steps that failed.
        """
        logger.warning("Discarding instance %s of torn-down %s", uri, test_id)
        errors: List[Tuple[str, BaseException]] = []
        if handle is not None:
            try:
                handle.release()
            except Exception as e:
                errors.append((f"release {uri}", e))
        try:
            self.client.uninstall(uri, config)
        except Exception as e:
            errors.append((f"uninstall {uri}", e))
        for step, e in errors:
            logger.warning("Failed to %s: %s", step, e)
        return errors

    def get_default_instance(self, ctx: TestContext) -> InstanceHandle:
        """Return the default instance of the context, creating it on first use.

        Raises:
            StateError: If the context is not set up or already torn down.
            ProvisioningError: If the first creation fails; a later call retries.
        """
        ctx._require_active("get default instance")
        with ctx._default_lock:
            if ctx._default_instance is None:
                ctx._default_instance = self.create_instance(ctx)
            return ctx._default_instance

    def get_test_id(self, ctx: TestContext) -> str:
        return ctx.test_id

    def get_temp_dir(self, ctx: TestContext) -> Path:
        return ctx.temp_dir

    def get_runtime_config(self, ctx: TestContext) -> RuntimeConfig:
        return ctx.runtime_config

    def teardown(self, ctx: TestContext) -> TeardownReport:
        """Release every instance and delete the context's directory.

        Every step is attempted even if earlier ones fail.

        Returns:
            TeardownReport describing what was released.

        Raises:
            StateError: If the context is not set up or already torn down.
            TeardownError: After all steps, if any of them failed.
        """
        with ctx._lock:
            ctx._require_active("tear down")
            test_id = ctx._test_id
            config = ctx._runtime_config
            temp_dir = ctx._temp_dir
            # Deactivate while draining so in-flight creations cannot append.
            ctx._test_id = None
            instances, ctx._instances = ctx._instances, []
            orphaned, ctx._orphaned = ctx._orphaned, []
            issued = list(ctx._issued)
        logger.debug("Tearing down %s", test_id)

        report = TeardownReport(test_id=test_id, issued=issued)
        errors: List[Tuple[str, BaseException]] = []

        for uri, handle in instances:
            try:
                handle.release()
                report.released.append(handle)
            except Exception as e:
                logger.warning("Failed to release instance %s: %s", uri, e)
                errors.append((f"release {uri}", e))
            self._uninstall(uri, config, report, errors)

        for uri in orphaned:
            self._uninstall(uri, config, report, errors)

        with ctx._default_lock:
            ctx._default_instance = None

        if self.settings.keep_temp_dirs:
            logger.info("Keeping temporary directory %s of %s", temp_dir, test_id)
        else:
            try:
                delete_recursive(temp_dir)
            except Exception as e:
                logger.warning("Failed to delete temporary directory %s: %s", temp_dir, e)
                errors.append((f"delete {temp_dir}", e))

        ctx._temp_dir = None
        ctx._runtime_config = None

        self._check_leaks(report, errors)

        if self.settings.gc_after_teardown:
            # Let finalizers of resources the test left open run now, while
            # their warnings can still be attributed to this test.
            gc.collect()

        if errors:
            logger.error("Teardown of %s failed with %d error(s)", test_id, len(errors))
            raise TeardownError(test_id, errors)
        return report

    def _uninstall(
        self,
        uri: InstanceURI,
        config: RuntimeConfig,
        report: TeardownReport,
        errors: List[Tuple[str, BaseException]],
    ) -> None:
        try:
            self.client.uninstall(uri, config)
            report.uninstalled.append(uri)
        except Exception as e:
            logger.warning("Failed to uninstall instance %s: %s", uri, e)
            errors.append((f"uninstall {uri}", e))

    def _check_leaks(
        self, report: TeardownReport, errors: List[Tuple[str, BaseException]]
    ) -> None:
        report.unreleased = [h for h in report.issued if not _is_closed(h)]

        mode = self.settings.leak_check
        if mode != LEAK_CHECK_OFF and report.unreleased:
            if mode == LEAK_CHECK_STRICT:
                try:
                    report.assert_no_leaks()
                except LeakError as e:
                    errors.append(("leak check", e))
            else:
                logger.warning(
                    "%d handle(s) still open after teardown of %s: %r",
                    len(report.unreleased),
                    report.test_id,
                    report.unreleased,
                )

        for listener in list(self._leak_listeners):
            try:
                listener(report)
            except Exception as e:
                logger.warning("Leak listener %r failed: %s", listener, e)
                errors.append((f"leak listener {listener!r}", e))
