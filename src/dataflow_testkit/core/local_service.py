"""SQLite-backed local service client.

Each instance is a SQLite database file stored below the default filesystem
root of the runtime configuration::

    <fs root>/instances/<cluster>/<instance>.db

This gives every test instance real, isolated storage without a database
server, in the spirit of the file-based SQLite databases used for unit tests.
"""

import logging
import sqlite3
import threading
from pathlib import Path
from typing import Any, List, Optional, Sequence
from urllib.parse import unquote, urlparse

from .errors import TestkitError
from .identity import InstanceURI
from .runtime_config import EXECUTION_MODE, FS_DEFAULT_FS, RuntimeConfig

logger = logging.getLogger(__name__)

INSTANCES_DIR = "instances"


class LocalServiceError(TestkitError):
    """Base class for errors raised by the local service client."""


class ServiceConfigError(LocalServiceError):
    """The runtime configuration cannot be used by the local service."""


class InstanceExistsError(LocalServiceError):
    """An instance is already installed at the given address."""


class InstanceNotFoundError(LocalServiceError):
    """No instance is installed at the given address."""


class LocalInstance:
    """Open handle on a local SQLite instance.

    The connection may be used from several threads; statements are
    serialized by an internal lock.
    """

    def __init__(self, uri: InstanceURI, path: Path):
        self.uri = uri
        self.path = path
        self._lock = threading.Lock()
        self._connection: Optional[sqlite3.Connection] = sqlite3.connect(
            str(path), check_same_thread=False
        )

    @property
    def closed(self) -> bool:
        return self._connection is None

    def _require_open(self) -> sqlite3.Connection:
        if self._connection is None:
            raise LocalServiceError(f"Instance handle {self.uri} is released")
        return self._connection

    def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        """Execute a statement and commit it.

        Returns:
            Number of rows changed by the statement.
        """
        with self._lock:
            conn = self._require_open()
            cursor = conn.execute(sql, params)
            conn.commit()
            return cursor.rowcount

    def query(self, sql: str, params: Sequence[Any] = ()) -> List[tuple]:
        """Run a query and return all rows."""
        with self._lock:
            conn = self._require_open()
            return conn.execute(sql, params).fetchall()

    def release(self) -> None:
        """Close the underlying connection. Releasing twice is a no-op."""
        with self._lock:
            if self._connection is None:
                logger.debug("Instance handle %s already released", self.uri)
                return
            self._connection.close()
            self._connection = None
        logger.debug("Released instance handle %s", self.uri)

    def __enter__(self) -> "LocalInstance":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"LocalInstance({str(self.uri)!r}, {state})"


class LocalServiceClient:
    """Service client storing instances as SQLite files on the local filesystem."""

    def instance_path(self, uri: InstanceURI, config: RuntimeConfig) -> Path:
        """Path of the database file backing ``uri``.

        Raises:
            ServiceConfigError: If the configuration does not describe a local,
                file-based environment.
        """
        if not config.is_local:
            raise ServiceConfigError(
                f"Local service requires {EXECUTION_MODE}=local, "
                f"got {config.get(EXECUTION_MODE)!r}"
            )
        fs_uri = config.get(FS_DEFAULT_FS)
        if not fs_uri:
            raise ServiceConfigError(f"Missing {FS_DEFAULT_FS} in configuration")
        parsed = urlparse(fs_uri)
        if parsed.scheme != "file":
            raise ServiceConfigError(
                f"Local service requires a file:// {FS_DEFAULT_FS}, got {fs_uri!r}"
            )
        root = Path(unquote(parsed.path))
        return root / INSTANCES_DIR / uri.cluster / f"{uri.instance}.db"

    def is_installed(self, uri: InstanceURI, config: RuntimeConfig) -> bool:
        return self.instance_path(uri, config).exists()

    def install(self, uri: InstanceURI, config: RuntimeConfig) -> None:
        path = self.instance_path(uri, config)
        path.parent.mkdir(parents=True, exist_ok=True)
        try:
            # Exclusive creation makes concurrent installs of one address fail.
            with open(path, "x"):
                pass
        except FileExistsError:
            raise InstanceExistsError(f"Instance {uri} is already installed")

        conn = sqlite3.connect(str(path))
        try:
            conn.execute(
                "CREATE TABLE instance_meta (key TEXT PRIMARY KEY, value TEXT NOT NULL)"
            )
            conn.execute(
                "INSERT INTO instance_meta (key, value) VALUES (?, ?)",
                ("uri", str(uri)),
            )
            conn.commit()
        finally:
            conn.close()
        logger.debug("Installed instance %s at %s", uri, path)

    def open(self, uri: InstanceURI, config: RuntimeConfig) -> LocalInstance:
        path = self.instance_path(uri, config)
        if not path.exists():
            raise InstanceNotFoundError(f"Instance {uri} is not installed")
        return LocalInstance(uri, path)

    def uninstall(self, uri: InstanceURI, config: RuntimeConfig) -> None:
        path = self.instance_path(uri, config)
        if not path.exists():
            raise InstanceNotFoundError(f"Instance {uri} is not installed")
        path.unlink()
        try:
            path.parent.rmdir()
        except OSError:
            # Other instances still live in this cluster directory.
            pass
        logger.debug("Uninstalled instance %s", uri)
