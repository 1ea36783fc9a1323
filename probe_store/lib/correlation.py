"""Correlation IDs for tying log lines to one request or job.

Held in a ContextVar so values follow threads started with copied contexts
and async tasks alike.
"""

import contextvars
from contextlib import contextmanager
from typing import Iterator
from uuid import uuid4

DEFAULT_CORRELATION_ID = 'no-correlation-id'

correlation_id: contextvars.ContextVar[str] = contextvars.ContextVar(
  'correlation_id', default=DEFAULT_CORRELATION_ID
)


def get_correlation_id() -> str:
  """Return the current correlation ID, or the default marker if unset."""
  return correlation_id.get()


def set_correlation_id(value: str) -> contextvars.Token:
  """Set the correlation ID for the current context.

  Returns:
      Token that can be passed to ``correlation_id.reset``
  """
  return correlation_id.set(value)


@contextmanager
def correlation_scope(value: str | None = None) -> Iterator[str]:
  """Run a block under a correlation ID, restoring the previous one after.

  Args:
      value: Correlation ID to use (a UUID is generated if None)

  Usage:
      with correlation_scope() as cid:
          client.insert(result)
  """
  value = value or str(uuid4())
  token = correlation_id.set(value)
  try:
    yield value
  finally:
    correlation_id.reset(token)
