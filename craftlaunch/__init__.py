"""Minecraft installer and launcher with mirror support."""

__version__ = "0.1.0"
