"""Yggdrasil authserver authentication."""

import logging
import secrets
import string
from typing import Optional

from pydantic import ValidationError

from ..config import DEFAULT_AUTH_SERVER
from ..errors import InvariantViolation, NoMatchingProfile, NotArray, NotObject
from ..versions.models import load_json
from .models import Agent, AuthenticateRequest, AuthenticateResponse, AuthSession

logger = logging.getLogger(__name__)

CLIENT_TOKEN_LENGTH = 30


def random_client_token(length: int = CLIENT_TOKEN_LENGTH) -> str:
    return "".join(secrets.choice(string.ascii_letters) for _ in range(length))


class YggdrasilAuthenticator:
    """Password login against a Yggdrasil compatible authserver."""

    def __init__(self, client, auth_server: str = DEFAULT_AUTH_SERVER, user_type: str = "mojang"):
        self.client = client
        self.auth_server = auth_server.rstrip("/")
        self.user_type = user_type

    async def authenticate(self, username: str, password: str, player_name: str,
                           agent_version: int = 1, client_token: Optional[str] = None) -> AuthSession:
        """Log in and pick the profile called ``player_name``."""
        client_token = client_token or random_client_token()
        request = AuthenticateRequest(
            agent=Agent(version=agent_version),
            username=username,
            password=password,
            clientToken=client_token,
        )
        url = f"{self.auth_server}/authenticate"
        raw = await self.client.post(
            url,
            json_data=request.model_dump(),
            headers={"Content-Type": "application/json"},
        )
        data = load_json(raw, url)
        if not isinstance(data, dict):
            raise NotObject("$", url)

        if data.get("clientToken") != client_token:
            raise InvariantViolation("authserver answered with a different client token")
        if not isinstance(data.get("availableProfiles"), list):
            raise NotArray("availableProfiles", url)
        try:
            response = AuthenticateResponse.model_validate(data)
        except ValidationError as e:
            raise NotObject(".".join(str(part) for part in e.errors()[0]["loc"]) or "$", url) from e

        for profile in response.availableProfiles:
            if profile.name == player_name:
                logger.info("Authenticated as %s", profile.name)
                return AuthSession(
                    player_name=profile.name,
                    uuid=profile.id,
                    access_token=response.accessToken,
                    client_token=client_token,
                    user_type=self.user_type,
                )
        raise NoMatchingProfile(player_name)
