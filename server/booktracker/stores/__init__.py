from .base import BookStore
from .memory import MemoryBookStore
from .sqlite import SQLAlchemyBookStore

__all__ = ["BookStore", "MemoryBookStore", "SQLAlchemyBookStore"]
