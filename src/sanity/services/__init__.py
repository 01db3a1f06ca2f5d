# src/sanity/services/__init__.py
from .app_state_service import AppStateService
from .auth_service import AuthService

__all__ = [
    "AppStateService",
    "AuthService",
]
