"""Core app configuration, database wiring, security and errors."""

from jobtracker.core.config import get_settings, settings
from jobtracker.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]
