"""Offline authentication for Minecraft."""

import hashlib
import uuid

from .models import AuthSession


class OfflineAuthenticator:
    """Offline mode authenticator with username only."""

    @staticmethod
    def offline_uuid(username: str) -> str:
        """Name based UUID of an offline player, as the game server derives it."""
        digest = hashlib.md5(f"OfflinePlayer:{username}".encode("utf-8")).digest()
        return uuid.UUID(bytes=digest, version=3).hex

    @staticmethod
    async def authenticate(username: str) -> AuthSession:
        """Authenticate offline with given username."""
        if not username or len(username) > 16:
            raise ValueError("Invalid username for offline mode")

        return AuthSession(
            player_name=username,
            uuid=OfflineAuthenticator.offline_uuid(username),
            access_token="",  # No token needed
            user_type="legacy",
        )
