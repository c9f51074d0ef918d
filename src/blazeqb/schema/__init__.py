"""
Schema migration utilities.
"""

from .migration import Migration, MigrationsBuilder, split_statements

__all__ = ["Migration", "MigrationsBuilder", "split_statements"]
