"""
Pytest configuration for DataFlow test kit tests.

Ensures that the src directory is in sys.path for proper imports and loads
the test kit fixtures.
"""

import sys
from pathlib import Path

# Add src directory to sys.path
src_dir = Path(__file__).parent / "src"
if src_dir.exists() and str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))

pytest_plugins = ["dataflow_testkit.testing.pytest_plugin"]
