"""Shared infrastructure: configuration, errors, logging, metrics and the connection pool."""
