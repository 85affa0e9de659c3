"""Common utilities."""

from .async_http import AsyncHTTPClient
from .hashing import digest, verify
from .logger import setup_logging

__all__ = ["AsyncHTTPClient", "digest", "verify", "setup_logging"]
