"""Helpers for driving the mocked connection in service tests."""

from unittest.mock import MagicMock

from sqlalchemy.dialects import postgresql


def set_rows(connection: MagicMock, rows: list[dict]) -> None:
  """Make the next ``execute(...).mappings().all()`` return ``rows``."""
  connection.execute.return_value.mappings.return_value.all.return_value = rows


def executed_statement(connection: MagicMock):
  """Return the statement passed to the last ``execute`` call."""
  return connection.execute.call_args[0][0]


def compile_postgres(statement):
  """Compile a statement for PostgreSQL, keeping parameters bound."""
  return statement.compile(dialect=postgresql.dialect())
