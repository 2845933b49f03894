"""Cycle engine: configuration snapshot and the periodic show/hide driver."""

from .cycle_config import CycleConfig
from .cycle_driver import CycleDriver, CycleHandle, WaitResult

__all__ = ['CycleConfig', 'CycleDriver', 'CycleHandle', 'WaitResult']
