"""SQLAlchemy models for Houselyzer."""
from houselyzer.models.app_state_model import AppState

__all__ = [
    "AppState",
]
