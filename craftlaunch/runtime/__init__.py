"""Java runtime selection."""

from .java_manager import JavaManager

__all__ = ["JavaManager"]
