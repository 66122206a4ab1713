from .repo import get_factory

__all__ = [
    "get_factory",
]
