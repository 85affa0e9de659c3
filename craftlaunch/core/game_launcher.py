"""Game launcher for Minecraft."""

import logging
import os
import stat
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from ..auth.models import AuthSession
from ..config import LauncherConfig
from ..errors import MissingJavaVersion
from ..runtime import JavaManager
from ..versions.models import Argument, VersionMetadata
from ..versions.rules import RuntimeContext, argument_allowed

logger = logging.getLogger(__name__)


def quote(value: str) -> str:
    return f'"{value}"'


def replace_all(text: str, replacements: Dict[str, str]) -> str:
    for placeholder, value in replacements.items():
        text = text.replace(placeholder, value)
    return text


@dataclass(frozen=True)
class LaunchScript:
    java_path: str
    jvm_args: str
    main_class: str
    game_args: str
    is_windows: bool = False

    @property
    def command_line(self) -> str:
        return " ".join(part for part in (quote(self.java_path), self.jvm_args, self.main_class, self.game_args) if part)

    def render(self) -> str:
        """Return the script body running the command line."""
        header = "@echo off" if self.is_windows else "#!/bin/sh"
        return f"{header}\n{self.command_line}\n"

    def write(self, path: Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.render(), encoding="utf-8")
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return path


class GameLauncher:
    def __init__(self, minecraft_dir: Path, config: Optional[LauncherConfig] = None,
                 java_manager: Optional[JavaManager] = None):
        self.minecraft_dir = Path(minecraft_dir)
        self.config = config or LauncherConfig()
        self.java_manager = java_manager or JavaManager(self.config)
        self.assets_dir = self.minecraft_dir / "assets"
        self.versions_dir = self.minecraft_dir / "versions"

    def natives_dir(self, metadata: VersionMetadata) -> Path:
        return self.versions_dir / metadata.id / "natives"

    @staticmethod
    def select_arguments(entries: Sequence[Argument], context: RuntimeContext) -> List[str]:
        """Flatten argument entries, dropping conditional ones whose rules block them."""
        tokens = []
        for entry in entries:
            if entry.kind == "conditional" and not argument_allowed(entry.rules, context):
                continue
            tokens.extend(entry.tokens())
        return tokens

    @staticmethod
    def join_arguments(tokens: Sequence[str]) -> str:
        return " ".join(tokens).rstrip()

    def assemble_classpath(self, paths: Sequence[Path], context: RuntimeContext) -> str:
        """Assemble Java classpath."""
        separator = ";" if context.is_windows else ":"
        return quote(separator.join(str(path) for path in paths))

    def placeholders(self, metadata: VersionMetadata, auth: AuthSession,
                     classpath: str) -> Dict[str, str]:
        asset_index_name = metadata.assetIndex.id if metadata.assetIndex else (metadata.assets or "")
        return {
            "${auth_player_name}": auth.player_name,
            "${version_name}": metadata.id,
            "${game_directory}": quote(str(self.minecraft_dir)),
            "${assets_root}": quote(str(self.assets_dir)),
            "${assets_index_name}": asset_index_name,
            "${auth_uuid}": auth.uuid,
            "${auth_access_token}": auth.access_token,
            "${user_type}": auth.user_type,
            "${version_type}": metadata.type or "",
            "${resolution_width}": str(self.config.resolution_width),
            "${resolution_height}": str(self.config.resolution_height),
            "${natives_directory}": quote(str(self.natives_dir(metadata))),
            "${launcher_name}": self.config.launcher_name,
            "${launcher_version}": self.config.launcher_version,
            "${classpath}": classpath,
            "${clientid}": self.config.client_id,
            "${auth_xuid}": self.config.auth_xuid,
        }

    def build_game_args(self, metadata: VersionMetadata, context: RuntimeContext,
                        replacements: Dict[str, str]) -> str:
        """Build game arguments."""
        tokens = self.select_arguments(metadata.arguments.game, context)
        return replace_all(self.join_arguments(tokens), replacements)

    def build_jvm_args(self, metadata: VersionMetadata, context: RuntimeContext,
                       replacements: Dict[str, str]) -> str:
        """Build JVM arguments."""
        tokens = self.select_arguments(metadata.arguments.jvm, context)
        args = replace_all(self.join_arguments(tokens), replacements)
        return args.replace("-Dos.name=Windows 10", '-Dos.name="Windows 10"')

    def prepare_launch(self, metadata: VersionMetadata, auth: AuthSession, classpath: Sequence[Path],
                       context: RuntimeContext) -> Optional[LaunchScript]:
        """Prepare launch command.

        Returns None, after logging a warning, when no Java executable is
        configured for the version's major version.
        """
        self.natives_dir(metadata).mkdir(parents=True, exist_ok=True)
        replacements = self.placeholders(metadata, auth, self.assemble_classpath(classpath, context))
        jvm_args = self.build_jvm_args(metadata, context, replacements)
        game_args = self.build_game_args(metadata, context, replacements)

        try:
            java_path = self.java_manager.find_java(metadata.javaVersion.majorVersion)
        except MissingJavaVersion as e:
            logger.warning("Has not java version needs: %s", e)
            return None

        return LaunchScript(
            java_path=java_path,
            jvm_args=jvm_args,
            main_class=metadata.mainClass or "",
            game_args=game_args,
            is_windows=context.is_windows,
        )

    def launch_game(self, script_path: Path) -> subprocess.Popen:
        """Launch the game process."""
        script_path = Path(script_path)
        if os.name == "nt":
            args = ["cmd", "/c", str(script_path)]
        else:
            args = ["/bin/sh", str(script_path)]
        return subprocess.Popen(args, cwd=self.minecraft_dir, stdin=subprocess.DEVNULL)
