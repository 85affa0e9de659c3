"""Version management module."""

from .manager import VersionManager
from .download_manager import DownloadManager
from .models import VersionManifest, VersionInfo, VersionMetadata
from .rules import RuntimeContext
from .sources import MirrorSource, Source

__all__ = [
    "VersionManager",
    "DownloadManager",
    "VersionManifest",
    "VersionInfo",
    "VersionMetadata",
    "RuntimeContext",
    "MirrorSource",
    "Source",
]
