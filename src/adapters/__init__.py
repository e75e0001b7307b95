"""
Adapters package
----------------

Storage abstraction so that the chart pipeline reads its source table and
writes rendered images through the same interface, whatever the backing
location is.
"""

from .storage import (  # noqa: F401
    LocalStorageAdapter,
    StorageAdapter,
)

__all__ = [
    "StorageAdapter",
    "LocalStorageAdapter",
]
