"""Ingestion and query services backed by the shared connection pool."""

from probe_store.services.ingestion_service import IngestionService
from probe_store.services.query_service import QueryService

__all__ = ['IngestionService', 'QueryService']
