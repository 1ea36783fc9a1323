"""Error taxonomy for the probe result store.

Every insert or query either returns its documented shape or raises one of
the exceptions below. Nothing here retries; retry policy belongs to callers.
"""

from typing import Any


class ProbeStoreError(Exception):
  """Base class for all probe store failures."""


class ValidationError(ProbeStoreError):
  """Input failed schema validation before any storage access.

  Attributes:
      errors: List of ``{'field', 'constraint', 'message'}`` dictionaries,
          one per offending field
  """

  def __init__(self, message: str, errors: list[dict[str, Any]] | None = None):
    super().__init__(message)
    self.errors = errors or []

  def fields(self) -> list[str]:
    """Return the names of the offending fields."""
    return [error['field'] for error in self.errors]


class ConnectionTimeoutError(ProbeStoreError):
  """The pool could not supply a connection within the acquisition timeout."""

  def __init__(self, operation: str, timeout: float):
    super().__init__(f'Timed out after {timeout}s waiting for a connection ({operation})')
    self.operation = operation
    self.timeout = timeout


class StorageError(ProbeStoreError):
  """The underlying read or write failed.

  The original driver exception is kept as ``__cause__``.
  """

  def __init__(self, operation: str, error: BaseException):
    super().__init__(f'{operation} failed: {error}')
    self.operation = operation
    self.original = error


class PoolClosedError(ProbeStoreError):
  """An operation was attempted after the pool was shut down."""

  def __init__(self, operation: str):
    super().__init__(f'Connection pool is closed ({operation})')
    self.operation = operation
