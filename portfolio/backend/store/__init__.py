"""Project store implementations."""

from portfolio.backend.store.base import ProjectStore
from portfolio.backend.store.local import FileProjectStore
from portfolio.backend.store.table import TableProjectStore

__all__ = ["FileProjectStore", "ProjectStore", "TableProjectStore"]
