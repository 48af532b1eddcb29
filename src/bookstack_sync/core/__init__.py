"""Core BookStack API client."""

from .client import BookStackClient

__all__ = ["BookStackClient"]
