"""Interfaces of the service whose instances the fixture manager provisions."""

from typing import Protocol, runtime_checkable

from .identity import InstanceURI
from .runtime_config import RuntimeConfig


@runtime_checkable
class InstanceHandle(Protocol):
    """An open instance of the service.

    The fixture manager keeps the address it opened each handle from, so a
    handle only needs to release itself. A ``closed`` property, when present,
    is used by the leak check.
    """

    def release(self) -> None:
        """Close client-side resources held by this handle."""
        ...


@runtime_checkable
class ServiceClient(Protocol):
    """Installs, opens and uninstalls service instances."""

    def install(self, uri: InstanceURI, config: RuntimeConfig) -> None:
        """Create the backing state of a new instance at ``uri``."""
        ...

    def open(self, uri: InstanceURI, config: RuntimeConfig) -> InstanceHandle:
        """Open a handle on an installed instance."""
        ...

    def uninstall(self, uri: InstanceURI, config: RuntimeConfig) -> None:
        """Remove the backing state of the instance at ``uri``."""
        ...
