"""Temporary directory helpers for test contexts."""

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Optional, Union

from ..core.identity import normalize_name

logger = logging.getLogger(__name__)


def create_temp_dir(
    prefix: str,
    suffix: str = "temp-dir",
    parent: Optional[Union[str, Path]] = None,
) -> Path:
    """Create a fresh, empty directory whose name starts with ``prefix``.

    The directory name is ``<prefix>-<random>-<suffix>`` so that the owning
    test can be identified when inspecting leftovers on disk.

    Args:
        prefix: Leading part of the directory name, usually the test identifier.
        suffix: Trailing part of the directory name.
        parent: Directory to create it in. Defaults to the system temp dir.

    Returns:
        Absolute path of the new directory.

    Raises:
        OSError: If the directory cannot be created.
    """
    if parent is not None:
        Path(parent).mkdir(parents=True, exist_ok=True)
    path = tempfile.mkdtemp(
        prefix=f"{normalize_name(prefix)}-",
        suffix=f"-{normalize_name(suffix)}",
        dir=str(parent) if parent is not None else None,
    )
    logger.debug("Created temporary directory %s", path)
    return Path(path).resolve()


def delete_recursive(path: Union[str, Path]) -> None:
    """Delete ``path`` and everything below it.

    A path that no longer exists is not an error.

    Raises:
        OSError: If some entry could not be removed.
    """
    path = Path(path)
    if not path.exists():
        logger.debug("Temporary directory %s already removed", path)
        return
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()
    logger.debug("Deleted %s", path)
