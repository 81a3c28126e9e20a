"""Key/value runtime configuration handed to the service client.

The fixture manager treats the configuration as an opaque bag of settings.
It only sets the default filesystem root and the execution mode, so that
instances provisioned for a test never touch a shared environment.
"""

from pathlib import Path
from typing import Any, Dict, Iterator, Mapping, Optional, Union

# Default filesystem root for the storage layer.
FS_DEFAULT_FS = "fs.defaultFS"
# Deprecated alias of FS_DEFAULT_FS, still read by older storage layers.
FS_DEFAULT_NAME = "fs.default.name"
# Where jobs run: "local" executes in-process, anything else names a cluster.
EXECUTION_MODE = "execution.mode"

LOCAL_EXECUTION = "local"

_TRUE_VALUES = ("true", "1", "yes", "on")
_FALSE_VALUES = ("false", "0", "no", "off")


class RuntimeConfig:
    """Mutable bag of string settings.

    Example:
        >>> conf = RuntimeConfig.local("/tmp/test-dir")
        >>> conf.get(EXECUTION_MODE)
        'local'
    """

    def __init__(self, values: Optional[Mapping[str, Any]] = None):
        self._values: Dict[str, str] = {}
        for key, value in (values or {}).items():
            self.set(key, value)

    @classmethod
    def local(cls, fs_root: Union[str, Path]) -> "RuntimeConfig":
        """Create a configuration rooted at ``fs_root`` with local execution."""
        fs_uri = Path(fs_root).resolve().as_uri()
        return cls(
            {
                FS_DEFAULT_FS: fs_uri,
                FS_DEFAULT_NAME: fs_uri,
                EXECUTION_MODE: LOCAL_EXECUTION,
            }
        )

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        if not key:
            raise ValueError("configuration key must be a non-empty string")
        self._values[key] = str(value)

    def unset(self, key: str) -> None:
        self._values.pop(key, None)

    def get_bool(self, key: str, default: bool = False) -> bool:
        """Read a boolean setting.

        Raises:
            ValueError: If the stored value is not a recognised boolean.
        """
        value = self._values.get(key)
        if value is None:
            return default
        normalized = value.lower().strip()
        if normalized in _TRUE_VALUES:
            return True
        if normalized in _FALSE_VALUES:
            return False
        raise ValueError(f"Setting '{key}' is not a boolean: {value!r}")

    @property
    def is_local(self) -> bool:
        return self.get(EXECUTION_MODE) == LOCAL_EXECUTION

    def copy(self) -> "RuntimeConfig":
        return RuntimeConfig(self._values)

    def as_dict(self) -> Dict[str, str]:
        return dict(self._values)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RuntimeConfig):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        return f"RuntimeConfig({self._values!r})"
