"""
city_explorer/core/errors.py
Typed failures raised by the cache-aside layer.
  • StorageError       → a statement failed against the store
  • NoDataError        → upstream returned nothing usable
  • ConfigurationError → a resource type is missing from a static table
None of them are retried.  The routing layer turns every CacheError into
a generic 500.
"""

from typing import Optional


class CacheError(Exception):
    """Base for every failure the cache-aside layer surfaces."""


class StorageError(CacheError):
    def __init__(self, message: str, statement: Optional[str] = None):
        super().__init__(message)
        self.statement = statement

    def __str__(self) -> str:
        base = super().__str__()
        return f"{base} [{self.statement}]" if self.statement else base


class NoDataError(CacheError):
    def __init__(self, resource_type: str, detail: str = "upstream returned no data"):
        super().__init__(f"{resource_type}: {detail}")
        self.resource_type = resource_type


class ConfigurationError(CacheError):
    pass
