"""Domain layer: actors, error taxonomy and services."""

from src.domain.models import User

__all__ = ["User"]
