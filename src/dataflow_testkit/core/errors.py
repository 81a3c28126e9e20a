"""Exception hierarchy for the DataFlow test kit.

All errors raised by the fixture manager derive from ``TestkitError`` so that
callers can catch every test-kit failure with a single ``except`` clause, while
still telling provisioning failures apart from programming defects.
"""

from typing import Any, List, Optional, Sequence, Tuple


class TestkitError(Exception):
    """Base class for all test kit errors."""

    # Not a test case, keep pytest from collecting it.
    __test__ = False


class ProvisioningError(TestkitError):
    """Raised when a test instance or its temporary directory cannot be created.

    Attributes:
        address: The instance address being provisioned, if one was derived.
    """

    def __init__(self, message: str, address: Optional[str] = None):
        super().__init__(message)
        self.address = address


class StateError(TestkitError):
    """Raised when a context is used before setup or after teardown."""


class LeakError(TestkitError):
    """Raised when handles issued by a context are still open after teardown.

    Attributes:
        handles: The handles that did not report a closed state.
    """

    def __init__(self, message: str, handles: Sequence[Any] = ()):
        super().__init__(message)
        self.handles = list(handles)


class TeardownError(TestkitError):
    """Raised once teardown has attempted every step and at least one failed.

    Attributes:
        test_id: Identifier of the test whose context was torn down.
        errors: Ordered ``(step, exception)`` pairs, one per failed step.
    """

    def __init__(self, test_id: str, errors: List[Tuple[str, BaseException]]):
        self.test_id = test_id
        self.errors = list(errors)
        details = "; ".join(
            f"{step}: {type(exc).__name__}: {exc}" for step, exc in self.errors
        )
        super().__init__(
            f"Teardown of '{test_id}' failed with {len(self.errors)} error(s): {details}"
        )

    @property
    def exceptions(self) -> List[BaseException]:
        """The collected exceptions, without their step descriptions."""
        return [exc for _, exc in self.errors]


class InstanceURIError(TestkitError, ValueError):
    """Raised when an instance address cannot be parsed."""
