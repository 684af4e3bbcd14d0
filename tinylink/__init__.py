"""
tinylink package initializer.
"""

from . import errors
from . import manager
from . import storage

__all__ = ["errors", "manager", "storage"]

__version__ = "1.0"
