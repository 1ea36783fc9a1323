"""API routers mirroring the external pipes (query) and events (ingest) API."""

from fastapi import Request

from probe_store.client import TimescaleClient


def get_client(request: Request) -> TimescaleClient:
  """Dependency returning the client created at application startup."""
  return request.app.state.client
