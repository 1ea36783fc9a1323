"""Pipe Response Envelope

Every catalog query answers with the ``{data, meta, rows, statistics}``
envelope of the external analytics API it replaces, whatever the storage
engine underneath.
"""

from typing import Any, Generic, Sequence, TypeVar

from pydantic import BaseModel, Field, model_validator

RowT = TypeVar('RowT', bound=BaseModel)


class QueryStatistics(BaseModel):
  """Execution statistics reported alongside the rows.

  Attributes:
      elapsed: Wall-clock seconds spent, connection wait included
      rows_read: Rows returned by the storage round-trip
  """

  elapsed: float = Field(default=0.0, ge=0)
  rows_read: int = Field(default=0, ge=0)


class PipeResponse(BaseModel, Generic[RowT]):
  """Result envelope shared by all catalog queries.

  Attributes:
      data: Result rows
      meta: Column metadata (always an empty object)
      rows: Number of rows in ``data``
      statistics: Execution statistics
  """

  data: list[RowT] = Field(default_factory=list)
  meta: dict[str, Any] = Field(default_factory=dict)
  rows: int = Field(..., ge=0)
  statistics: QueryStatistics = Field(default_factory=QueryStatistics)

  @model_validator(mode='after')
  def validate_rows(self) -> 'PipeResponse':
    """Validate rows matches the number of data rows."""
    if self.rows != len(self.data):
      raise ValueError(f'rows ({self.rows}) must equal len(data) ({len(self.data)})')
    return self

  @classmethod
  def build(cls, data: Sequence[RowT], elapsed: float, rows_read: int | None = None) -> 'PipeResponse':
    """Wrap rows with their statistics.

    Args:
        data: Result rows
        elapsed: Seconds spent answering the query
        rows_read: Storage rows read (defaults to len(data))
    """
    data = list(data)
    return cls(
      data=data,
      rows=len(data),
      statistics=QueryStatistics(
        elapsed=elapsed, rows_read=len(data) if rows_read is None else rows_read
      ),
    )

  def to_dict(self) -> dict[str, Any]:
    """JSON-ready dictionary using the camelCase row keys."""
    return self.model_dump(by_alias=True, mode='json')
