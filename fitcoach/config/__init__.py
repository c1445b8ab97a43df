"""Application configuration module.

- **settings.py**: Environment-based settings (Pydantic BaseSettings)
  - Database URL, JWT secret, LLM provider keys and endpoints
  - Loaded from .env file via pydantic-settings
"""
from fitcoach.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
