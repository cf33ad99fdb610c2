"""Hash cache persistence."""

from .init import init_db_if_needed
from .manager import CacheStore

__all__ = ['init_db_if_needed', 'CacheStore']
