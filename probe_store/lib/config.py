"""Configuration loaded from environment variables.

Values come from the process environment, optionally seeded from ``.env``
and ``.env.local`` files in the working directory.

Environment variables:
    TIMESCALE_URL: Connection URL (falls back to DATABASE_URL)
    TIMESCALE_POOL_MAX: Maximum concurrent connections (default: 20)
    TIMESCALE_POOL_IDLE_TIMEOUT: Seconds before an idle connection is evicted (default: 30)
    TIMESCALE_POOL_CONNECTION_TIMEOUT: Seconds to wait for a free connection (default: 2)
    LOG_LEVEL: Logging level (default: INFO)
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator


class Settings(BaseModel):
  """Connection pool and logging settings."""

  database_url: str | None = Field(default=None, description='SQLAlchemy connection URL')
  pool_max_size: int = Field(default=20, ge=1, description='Hard cap on concurrent connections')
  pool_idle_timeout: float = Field(default=30.0, gt=0, description='Idle eviction timeout (seconds)')
  connection_timeout: float = Field(
    default=2.0, gt=0, description='Connection acquisition timeout (seconds)'
  )
  log_level: str = Field(default='INFO', description='Logging level name')

  @field_validator('database_url')
  @classmethod
  def normalize_database_url(cls, v: str | None) -> str | None:
    """Rewrite Heroku-style and bare postgres URLs to the psycopg driver."""
    if not v:
      return None
    if v.startswith('postgres://'):
      return v.replace('postgres://', 'postgresql+psycopg://', 1)
    if v.startswith('postgresql://'):
      return v.replace('postgresql://', 'postgresql+psycopg://', 1)
    return v

  @field_validator('log_level')
  @classmethod
  def normalize_log_level(cls, v: str) -> str:
    return v.upper()

  @classmethod
  def from_env(cls, load_files: bool = True) -> 'Settings':
    """Build settings from the environment.

    Args:
        load_files: Load ``.env`` and ``.env.local`` first (existing
            environment variables win)

    Returns:
        Validated settings
    """
    if load_files:
      for filename in ('.env', '.env.local'):
        if Path(filename).exists():
          load_dotenv(filename, override=False)

    values = {
      'database_url': os.getenv('TIMESCALE_URL') or os.getenv('DATABASE_URL'),
      'pool_max_size': os.getenv('TIMESCALE_POOL_MAX'),
      'pool_idle_timeout': os.getenv('TIMESCALE_POOL_IDLE_TIMEOUT'),
      'connection_timeout': os.getenv('TIMESCALE_POOL_CONNECTION_TIMEOUT'),
      'log_level': os.getenv('LOG_LEVEL'),
    }
    return cls(**{key: value for key, value in values.items() if value is not None})
