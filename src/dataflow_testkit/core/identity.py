"""Test identifiers and instance addresses.

Test identifiers are derived from the fully-qualified test class name and the
test method name, e.g. ``pkg.Foo`` + ``testBar`` -> ``pkg_Foo_testBar``.
Instance addresses embed both the test identifier and a per-context sequence
number, so that no two instances collide within a test or across tests::

    testkit://.fake.pkg_Foo_testBar-0/pkg_Foo_testBar
"""

import re
from dataclasses import dataclass

from .errors import InstanceURIError

DEFAULT_URI_SCHEME = "testkit"

# Prefix marking clusters that only exist for the lifetime of a test.
FAKE_CLUSTER_PREFIX = ".fake."

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_\-]")
_SCHEME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")


def is_valid_scheme(scheme: str) -> bool:
    """Whether ``scheme`` can start an instance address (RFC 3986 scheme syntax)."""
    return bool(scheme) and _SCHEME_PATTERN.match(scheme) is not None


def normalize_name(name: str) -> str:
    """Replace path-like separators and other unsafe characters with ``_``."""
    return _UNSAFE_CHARS.sub("_", name)


def make_test_id(test_class_name: str, test_method_name: str) -> str:
    """Build the identifier for a test, eg. ``org_package_ClassName_testMethod``.

    Raises:
        ValueError: If either name is empty.
    """
    if not test_class_name or not test_method_name:
        raise ValueError("test class name and test method name must be non-empty")
    return normalize_name(f"{test_class_name}_{test_method_name}")


@dataclass(frozen=True)
class InstanceURI:
    """Address of one test instance: ``<scheme>://<cluster>/<instance>``."""

    scheme: str
    cluster: str
    instance: str

    def __post_init__(self):
        if not is_valid_scheme(self.scheme):
            raise InstanceURIError(f"Invalid URI scheme: {self.scheme!r}")
        if not self.cluster or "/" in self.cluster:
            raise InstanceURIError(f"Invalid cluster component: {self.cluster!r}")
        if not self.instance or "/" in self.instance:
            raise InstanceURIError(f"Invalid instance component: {self.instance!r}")

    @classmethod
    def parse(cls, value: str) -> "InstanceURI":
        """Parse an address string.

        Raises:
            InstanceURIError: If the string is not ``scheme://cluster/instance``.
        """
        scheme, sep, rest = value.partition("://")
        if not sep:
            raise InstanceURIError(f"Missing '://' in instance URI: {value!r}")
        cluster, sep, instance = rest.partition("/")
        if not sep:
            raise InstanceURIError(f"Missing instance name in URI: {value!r}")
        return cls(scheme=scheme, cluster=cluster, instance=instance)

    @property
    def is_fake(self) -> bool:
        return self.cluster.startswith(FAKE_CLUSTER_PREFIX)

    def __str__(self) -> str:
        return f"{self.scheme}://{self.cluster}/{self.instance}"


def make_instance_uri(
    test_id: str, sequence: int, scheme: str = DEFAULT_URI_SCHEME
) -> InstanceURI:
    """Derive the address of the ``sequence``-th instance created for ``test_id``."""
    if sequence < 0:
        raise ValueError(f"sequence must be non-negative, got {sequence}")
    return InstanceURI(
        scheme=scheme,
        cluster=f"{FAKE_CLUSTER_PREFIX}{test_id}-{sequence}",
        instance=test_id,
    )
