"""
Adapters layer - Sources of busy-period data.
"""

from .busy_data_file import BusyDataFileSource

__all__ = ["BusyDataFileSource"]
