"""Launcher error taxonomy."""

from typing import Optional


class LauncherError(Exception):
    """Base class for every error raised by the launcher."""


class TransportError(LauncherError):
    """A network fetch or post failed."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"request to {url} failed: {reason}")
        self.url = url
        self.reason = reason


class HashMismatch(LauncherError):
    """Downloaded bytes do not match the declared digest."""

    def __init__(self, expected: str, actual: str, url: Optional[str] = None):
        message = f"hash not same\ngot: {actual}\nneed: {expected}"
        if url:
            message += f"\nurl: {url}"
        super().__init__(message)
        self.expected = expected
        self.actual = actual
        self.url = url


HashNotSame = HashMismatch


class NotArray(LauncherError):
    def __init__(self, path: str, url: Optional[str] = None):
        message = f"{path} is not an array"
        super().__init__(f"{message} in {url}" if url else message)
        self.path = path
        self.url = url


class NotObject(LauncherError):
    def __init__(self, path: str, url: Optional[str] = None):
        message = f"{path} is not an object"
        super().__init__(f"{message} in {url}" if url else message)
        self.path = path
        self.url = url


class VersionNotFound(LauncherError):
    def __init__(self, version_id: str):
        super().__init__(f'id "{version_id}" is not found')
        self.version_id = version_id


class NoMatchingProfile(LauncherError):
    def __init__(self, player_name: str):
        super().__init__(f"no profile named {player_name!r} on this account")
        self.player_name = player_name


class MissingJavaVersion(LauncherError):
    """The required Java major version has no configured executable."""

    def __init__(self, major: str):
        super().__init__(f"required Java version {major} not found")
        self.major = major


class InvariantViolation(LauncherError):
    """A remote service broke a contract the launcher relies on."""


class ConfigError(LauncherError):
    """The local configuration file could not be loaded."""
