"""Core app configuration and database."""

from rampart.core.config import get_settings, settings
from rampart.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]
