"""Request-scoped accessors for state the application factory puts on app.state."""

from fastapi import Request

from jobtracker.core.config import Settings


def get_app_settings(request: Request) -> Settings:
    """Dependency: the Settings the running app was built with."""
    return request.app.state.settings
