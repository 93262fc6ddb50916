"""Application-wide settings."""

from src.config.settings import Settings

__all__ = ["Settings"]
