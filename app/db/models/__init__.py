# Models package (re-export feature modules for stable imports)
from .storage.slot import StorageSlot

__all__ = [
    "StorageSlot",
]
