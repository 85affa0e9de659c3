"""Version manifest and metadata manager."""

import logging
from pathlib import Path
from typing import Optional

from ..errors import VersionNotFound
from ..utils.hashing import verify
from .download_manager import write_json
from .models import VersionManifest, VersionMetadata, VersionInfo, load_json, parse_manifest, parse_metadata
from .sources import ArtifactKind, MirrorSource, Source

logger = logging.getLogger(__name__)

MANIFEST_FILE = "version_manifest_v2.json"


class VersionManager:
    """Resolves a version id to its verified descriptor.

    The manifest is fetched from the entry point of the configured source
    and saved as ``version_manifest_v2.json`` under the install root; the
    descriptor lands in ``versions/<id>/<id>.json``.
    """

    def __init__(self, client, mc_dir: Path, source: Source = Source.MOJANG,
                 mirror: Optional[MirrorSource] = None):
        self.client = client
        self.mc_dir = Path(mc_dir)
        self.versions_dir = self.mc_dir / "versions"
        self.mirror = mirror or MirrorSource(source)

    async def fetch_manifest(self) -> VersionManifest:
        """Fetch the launcher version manifest."""
        url = self.mirror.manifest_url()
        logger.info("Fetching version manifest from %s", url)
        data = load_json(await self.client.fetch(url), url)
        manifest = parse_manifest(data, url)
        await write_json(self.mc_dir / MANIFEST_FILE, data)
        return manifest

    async def get_version_info(self, version_id: str, manifest: Optional[VersionManifest] = None) -> VersionInfo:
        """Get version info for a specific version."""
        if not manifest:
            manifest = await self.fetch_manifest()
        version = manifest.find(version_id)
        if version is None:
            raise VersionNotFound(version_id)
        return version

    async def fetch_version_metadata(self, version_info: VersionInfo) -> VersionMetadata:
        """Fetch, verify and save the version.json of ``version_info``."""
        version_dir = self.versions_dir / version_info.id
        version_dir.mkdir(parents=True, exist_ok=True)

        url = self.mirror.rewrite(version_info.url, ArtifactKind.VERSION)
        raw = await self.client.fetch(url)
        verify(raw, version_info.sha1, "sha1", url)

        data = load_json(raw, url)
        metadata = parse_metadata(data, url)
        await write_json(version_dir / f"{version_info.id}.json", data)
        return metadata

    async def resolve(self, version_id: str) -> VersionMetadata:
        """Resolve ``version_id`` to its descriptor."""
        self.versions_dir.mkdir(parents=True, exist_ok=True)
        version_info = await self.get_version_info(version_id)
        logger.info("Resolved %s (%s)", version_info.id, version_info.type or "unknown type")
        return await self.fetch_version_metadata(version_info)
