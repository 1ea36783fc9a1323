"""Validation entry points for untyped records.

Each function either returns a strongly typed model or raises
``probe_store.lib.errors.ValidationError`` naming every offending field and
the constraint it violated. Validation never touches storage.
"""

from typing import Any, Mapping, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from probe_store.lib.errors import ValidationError
from probe_store.models.audit_log import AuditLog
from probe_store.models.probe_result import HttpResponse, HttpTiming, TcpResponse

ModelT = TypeVar('ModelT', bound=BaseModel)


def _field_name(loc: tuple) -> str:
  return '.'.join(str(part) for part in loc) or '__root__'


def parse_model(model: type[ModelT], record: Any) -> ModelT:
  """Validate ``record`` against ``model``.

  Args:
      model: Pydantic model class
      record: Untyped input (usually a decoded JSON object)

  Returns:
      Validated model instance

  Raises:
      ValidationError: With one entry per violated constraint
  """
  try:
    return model.model_validate(record)
  except PydanticValidationError as e:
    errors = [
      {
        'field': _field_name(error['loc']),
        'constraint': error['type'],
        'message': error['msg'],
      }
      for error in e.errors()
    ]
    fields = ', '.join(error['field'] for error in errors)
    raise ValidationError(f'Invalid {model.__name__}: {fields}', errors) from e


def validate_http_response(record: Mapping[str, Any]) -> HttpResponse:
  return parse_model(HttpResponse, record)


def validate_tcp_response(record: Mapping[str, Any]) -> TcpResponse:
  return parse_model(TcpResponse, record)


def validate_audit_log(record: Mapping[str, Any]) -> AuditLog:
  return parse_model(AuditLog, record)


def validate_timing(record: Mapping[str, Any]) -> HttpTiming:
  return parse_model(HttpTiming, record)
