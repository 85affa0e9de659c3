"""Authentication module for Minecraft accounts."""

from .models import AuthSession
from .offline import OfflineAuthenticator
from .yggdrasil import YggdrasilAuthenticator

__all__ = ["AuthSession", "OfflineAuthenticator", "YggdrasilAuthenticator"]
