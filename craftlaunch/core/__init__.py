"""Install and launch orchestration."""

from .game_launcher import GameLauncher, LaunchScript
from .session import InstallationSession, InstallResult

__all__ = ["GameLauncher", "LaunchScript", "InstallationSession", "InstallResult"]
