"""FastAPI application exposing the pipes and events API."""

import time
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from probe_store.client import TimescaleClient
from probe_store.lib.correlation import set_correlation_id
from probe_store.lib.errors import (
  ConnectionTimeoutError,
  PoolClosedError,
  ProbeStoreError,
  StorageError,
  ValidationError,
)
from probe_store.lib.structured_logger import StructuredLogger
from probe_store.routers import events, pipes

logger = StructuredLogger(__name__)

# exception type -> (status code, error code); first match wins
ERROR_RESPONSES = (
  (ValidationError, 400, 'VALIDATION_ERROR'),
  (ConnectionTimeoutError, 503, 'CONNECTION_TIMEOUT'),
  (PoolClosedError, 503, 'POOL_CLOSED'),
  (StorageError, 500, 'STORAGE_ERROR'),
)


def error_response(exc: ProbeStoreError) -> JSONResponse:
  """Map a probe store error to its HTTP response."""
  status_code, error_code = 500, 'INTERNAL_ERROR'
  for error_type, status, code in ERROR_RESPONSES:
    if isinstance(exc, error_type):
      status_code, error_code = status, code
      break

  content = {'error_code': error_code, 'message': str(exc)}
  if isinstance(exc, ValidationError):
    content['errors'] = exc.errors
  return JSONResponse(status_code=status_code, content=content)


def create_app(client: TimescaleClient | None = None) -> FastAPI:
  """Build the application.

  Args:
      client: Client to serve requests with. When None, one is created from
          the environment at startup and closed at shutdown.
  """

  @asynccontextmanager
  async def lifespan(app: FastAPI):
    """Own the connection pool for the lifetime of the process."""
    owned = client is None
    app.state.client = TimescaleClient.from_settings(ping=True) if owned else client
    logger.info('Application started', owns_pool=owned)
    try:
      yield
    finally:
      if owned:
        app.state.client.close()
      logger.info('Application stopped')

  app = FastAPI(
    title='Probe Store API',
    description='Ingestion and pre-aggregated queries for uptime probe results',
    version='0.1.0',
    lifespan=lifespan,
  )

  @app.middleware('http')
  async def add_correlation_id(request: Request, call_next):
    """Set the correlation ID from X-Correlation-ID (or a new UUID) and echo it back."""
    correlation_id = request.headers.get('X-Correlation-ID', str(uuid4()))
    set_correlation_id(correlation_id)
    request.state.correlation_id = correlation_id

    start_time = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start_time) * 1000

    response.headers['X-Correlation-ID'] = correlation_id
    if request.url.path not in ('/health', '/metrics'):
      logger.info(
        'Request completed',
        endpoint=request.url.path,
        method=request.method,
        status_code=response.status_code,
        duration_ms=round(duration_ms, 2),
      )
    return response

  @app.exception_handler(ProbeStoreError)
  async def probe_store_error_handler(request: Request, exc: ProbeStoreError):
    return error_response(exc)

  @app.exception_handler(RequestValidationError)
  async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Report malformed query parameters and bodies in the same 400 shape."""
    errors = [
      {
        'field': '.'.join(str(part) for part in error['loc'][1:]) or str(error['loc'][0]),
        'constraint': error['type'],
        'message': error['msg'],
      }
      for error in exc.errors()
    ]
    return error_response(ValidationError('Invalid request', errors))

  @app.get('/health')
  def health(request: Request):
    """Health check including the pool snapshot."""
    return {'status': 'healthy', 'pool': request.app.state.client.pool.status()}

  @app.get('/metrics')
  def metrics():
    """Prometheus metrics endpoint."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

  app.include_router(pipes.router)
  app.include_router(events.router)
  return app
