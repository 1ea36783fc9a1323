"""Events API: append probe results and audit events over HTTP.

The body is one JSON object or an array of them. Every record is validated
before the first insert, so an invalid record rejects the whole request and
nothing is written.
"""

from typing import Any, Callable

from fastapi import APIRouter, Body, Depends, Query
from pydantic import BaseModel, Field

from probe_store.client import TimescaleClient
from probe_store.lib.errors import ValidationError
from probe_store.lib.structured_logger import StructuredLogger
from probe_store.models.validation import (
  validate_audit_log,
  validate_http_response,
  validate_tcp_response,
)
from probe_store.routers import get_client

logger = StructuredLogger(__name__)

router = APIRouter(prefix='/v0', tags=['Events'])

# datasource name -> (validator, client insert method name)
DATASOURCES: dict[str, tuple[Callable[[Any], Any], str]] = {
  'http_responses': (validate_http_response, 'insert_http_response'),
  'tcp_responses': (validate_tcp_response, 'insert_tcp_response'),
  'audit_logs': (validate_audit_log, 'insert_audit_log'),
}


class EventsResponse(BaseModel):
  """Outcome of an events request."""

  successful_rows: int = Field(..., ge=0, description='Rows written')
  quarantined_rows: int = Field(default=0, ge=0, description='Rows rejected after acceptance')


def _validate_all(validator: Callable[[Any], Any], records: list[Any]) -> list[Any]:
  """Validate every record, collecting errors from all of them."""
  validated, errors = [], []
  for index, record in enumerate(records):
    try:
      validated.append(validator(record))
    except ValidationError as e:
      errors.extend({**error, 'field': f'[{index}].{error["field"]}'} for error in e.errors)
  if errors:
    raise ValidationError(f'{len(errors)} invalid field(s) in request body', errors)
  return validated


@router.post('/events', response_model=EventsResponse)
def ingest_events(
  name: str = Query(..., description='http_responses, tcp_responses or audit_logs'),
  payload: Any = Body(...),
  client: TimescaleClient = Depends(get_client),
) -> EventsResponse:
  """Validate then insert one or more records into the named datasource."""
  if name not in DATASOURCES:
    raise ValidationError(
      f'Unknown datasource: {name}',
      [{'field': 'name', 'constraint': 'enum', 'message': f'must be one of {", ".join(DATASOURCES)}'}],
    )
  validator, method = DATASOURCES[name]

  records = payload if isinstance(payload, list) else [payload]
  validated = _validate_all(validator, records)

  insert = getattr(client, method)
  for record in validated:
    insert(record)

  logger.info('Events ingested', datasource=name, rows=len(validated))
  return EventsResponse(successful_rows=len(validated))
