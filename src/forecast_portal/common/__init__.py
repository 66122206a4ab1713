from . import categories, tables
from .storage import (
    ExecuteResult,
    IntegrityViolation,
    Storage,
    StorageError,
    StorageUnavailable,
)

__all__ = [
    "categories",
    "tables",
    "ExecuteResult",
    "IntegrityViolation",
    "Storage",
    "StorageError",
    "StorageUnavailable",
]
