"""Host test framework integration for the DataFlow test kit."""

from .unittest_support import InstanceTestCase

__all__ = ["InstanceTestCase"]
