"""Java runtime lookup for Minecraft."""

import logging
from typing import Dict, Union

from ..config import LauncherConfig
from ..errors import MissingJavaVersion

logger = logging.getLogger(__name__)


class JavaManager:
    def __init__(self, java_versions: Union[LauncherConfig, Dict[str, str]]):
        if isinstance(java_versions, LauncherConfig):
            java_versions = java_versions.java_versions
        self.java_versions = dict(java_versions)

    def find_java(self, major_version: Union[int, str]) -> str:
        """Return the configured executable for a Java major version."""
        key = str(major_version)
        java_path = self.java_versions.get(key)
        if not java_path:
            raise MissingJavaVersion(key)
        logger.debug("Using Java %s at %s", key, java_path)
        return java_path
