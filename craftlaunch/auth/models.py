"""Authentication data models."""

from pydantic import BaseModel, Field
from typing import List, Optional


class AuthSession(BaseModel):
    """What the launch command needs to know about the player."""
    player_name: str
    uuid: str
    access_token: str = ""
    client_token: Optional[str] = None
    user_type: str = "mojang"


class Agent(BaseModel):
    name: str = "Minecraft"
    version: int = 1


class AuthenticateRequest(BaseModel):
    agent: Agent = Field(default_factory=Agent)
    username: str
    password: str
    clientToken: str
    requestUser: bool = False


class GameProfile(BaseModel):
    id: str
    name: str


class AuthenticateResponse(BaseModel):
    accessToken: str
    clientToken: Optional[str] = None
    availableProfiles: List[GameProfile] = Field(default_factory=list)
