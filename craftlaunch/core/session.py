"""Installation session: resolve, install and prepare one version."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from ..auth.models import AuthSession
from ..auth.yggdrasil import YggdrasilAuthenticator
from ..config import LauncherConfig
from ..utils.async_http import AsyncHTTPClient
from ..versions.download_manager import DownloadManager
from ..versions.manager import VersionManager
from ..versions.models import AssetIndex, VersionMetadata
from ..versions.rules import RuntimeContext
from ..versions.sources import MirrorSource, Source
from .game_launcher import GameLauncher, LaunchScript

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstallResult:
    metadata: VersionMetadata
    classpath: Tuple[Path, ...]
    asset_index: AssetIndex


class InstallationSession:
    """Owns everything needed to install and launch one version.

    Use it as an async context manager when no HTTP client is given, so
    the session opens and closes its own aiohttp session.
    """

    def __init__(self, mc_dir: Path, version_id: str, source: Source = Source.MOJANG,
                 config: Optional[LauncherConfig] = None, context: Optional[RuntimeContext] = None,
                 client=None, mirror: Optional[MirrorSource] = None):
        self.mc_dir = Path(mc_dir).resolve()
        self.version_id = version_id
        self.source = source
        self.config = config or LauncherConfig()
        self.context = context or RuntimeContext.current()
        self.mirror = mirror or MirrorSource(source)
        self.client = client
        self._own_client: Optional[AsyncHTTPClient] = None
        self.result: Optional[InstallResult] = None

    async def __aenter__(self):
        if self.client is None:
            self._own_client = AsyncHTTPClient()
            self.client = await self._own_client.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if self._own_client is not None:
            await self._own_client.__aexit__(exc_type, exc, tb)
            self._own_client = None
            self.client = None

    @property
    def version_manager(self) -> VersionManager:
        return VersionManager(self.client, self.mc_dir, self.source, mirror=self.mirror)

    @property
    def download_manager(self) -> DownloadManager:
        return DownloadManager(
            self.client,
            self.mc_dir,
            self.source,
            concurrent_downloads=self.config.concurrent_downloads,
            request_delay=self.config.request_delay,
            mirror=self.mirror,
        )

    async def install(self) -> InstallResult:
        """Resolve the version then install libraries, client jar and assets."""
        self.mc_dir.mkdir(parents=True, exist_ok=True)
        metadata = await self.version_manager.resolve(self.version_id)

        downloads = self.download_manager
        libraries = await downloads.download_libraries(metadata, self.context)
        client_jar = await downloads.download_version_jar(metadata)
        asset_index = await downloads.download_asset_index(metadata)
        await downloads.download_assets(asset_index)

        self.result = InstallResult(
            metadata=metadata,
            classpath=tuple(libraries) + (client_jar,),
            asset_index=asset_index,
        )
        logger.info("Installed %s into %s", metadata.id, self.mc_dir)
        return self.result

    async def authenticate(self, username: str, password: str, player_name: str) -> AuthSession:
        if self.result is None:
            raise RuntimeError("install() must run before authenticate()")
        authenticator = YggdrasilAuthenticator(self.client, self.config.auth_server, self.config.user_type)
        return await authenticator.authenticate(
            username, password, player_name, agent_version=self.result.metadata.complianceLevel
        )

    def launch_script(self, auth: AuthSession) -> Optional[LaunchScript]:
        """Build the launch script, or None when the Java version is not configured."""
        if self.result is None:
            raise RuntimeError("install() must run before launch_script()")
        launcher = GameLauncher(self.mc_dir, self.config)
        return launcher.prepare_launch(self.result.metadata, auth, self.result.classpath, self.context)
