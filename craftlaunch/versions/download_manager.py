"""Download manager for the client jar, libraries and assets."""

import asyncio
import json
import logging
import shutil
from pathlib import Path
from typing import Any, Awaitable, Dict, Iterable, List, Optional, Tuple, Union

import aiofiles

from ..errors import NotObject
from ..utils.hashing import matches, verify
from .models import AssetIndex, VersionMetadata, load_json, parse_asset_index
from .rules import RuntimeContext, library_allowed
from .sources import ArtifactKind, MirrorSource, Source

logger = logging.getLogger(__name__)


async def write_bytes(dest: Path, data: bytes):
    """Create missing parents then truncate and write ``dest``."""
    dest.parent.mkdir(parents=True, exist_ok=True)
    async with aiofiles.open(dest, 'wb') as f:
        await f.write(data)


async def write_json(dest: Path, data: Any):
    """Persist a JSON document pretty-printed with four spaces."""
    await write_bytes(dest, json.dumps(data, indent=4, ensure_ascii=False).encode("utf-8"))


class DownloadManager:
    """Fetches, verifies and persists the artifacts of one version.

    ``client`` is anything with an ``async fetch(url) -> bytes`` method.
    At most ``concurrent_downloads`` fetches run at once and each one keeps
    its slot for ``request_delay`` extra seconds. The first failure cancels
    every other download and is raised to the caller.
    """

    def __init__(self, client, mc_dir: Path, source: Source = Source.MOJANG,
                 concurrent_downloads: int = 8, request_delay: float = 0.0,
                 mirror: Optional[MirrorSource] = None):
        self.client = client
        self.mc_dir = Path(mc_dir)
        self.libraries_dir = self.mc_dir / "libraries"
        self.assets_dir = self.mc_dir / "assets"
        self.versions_dir = self.mc_dir / "versions"
        self.mirror = mirror or MirrorSource(source)
        self.request_delay = request_delay
        self.semaphore = asyncio.Semaphore(concurrent_downloads)
        self._in_flight: Dict[Tuple[Path, str, str], "asyncio.Future[Path]"] = {}
        self._dest_locks: Dict[Path, asyncio.Lock] = {}

    async def fetch_verified(self, url: str, expected_hash: str, algorithm: str = "sha1") -> bytes:
        """Fetch ``url`` and check its digest, without touching the disk."""
        async with self.semaphore:
            data = await self.client.fetch(url)
            if self.request_delay:
                await asyncio.sleep(self.request_delay)
        verify(data, expected_hash, algorithm, url)
        return data

    async def download_file(self, url: str, dest: Path, expected_hash: str,
                            algorithm: str = "sha1") -> Path:
        """Fetch, verify and persist one artifact.

        A destination that already holds the expected bytes is not fetched
        again. Concurrent requests for the same destination and hash share
        one download; requests for the same destination with another hash
        run one after the other and each checks its own hash. Nothing is
        written when verification fails.
        """
        key = (dest, expected_hash.lower(), algorithm)
        pending = self._in_flight.get(key)
        if pending is not None:
            return await pending
        task = asyncio.ensure_future(self._download(url, dest, expected_hash, algorithm))
        self._in_flight[key] = task
        try:
            return await task
        finally:
            if self._in_flight.get(key) is task:
                del self._in_flight[key]

    async def _download(self, url: str, dest: Path, expected_hash: str, algorithm: str) -> Path:
        async with self._dest_locks.setdefault(dest, asyncio.Lock()):
            return await self._download_locked(url, dest, expected_hash, algorithm)

    async def _download_locked(self, url: str, dest: Path, expected_hash: str, algorithm: str) -> Path:
        if await self.is_verified(dest, expected_hash, algorithm):
            logger.debug("Already verified: %s", dest)
            return dest
        data = await self.fetch_verified(url, expected_hash, algorithm)
        await write_bytes(dest, data)
        logger.debug("Downloaded %s -> %s", url, dest)
        return dest

    @staticmethod
    async def is_verified(file_path: Path, expected_hash: str, algorithm: str = "sha1") -> bool:
        """Check whether ``file_path`` exists and hashes to ``expected_hash``."""
        if not file_path.is_file():
            return False
        async with aiofiles.open(file_path, 'rb') as f:
            data = await f.read()
        return matches(data, expected_hash, algorithm)

    async def gather_all(self, coros: Iterable[Awaitable]) -> List:
        """Run ``coros`` concurrently, returning results in input order.

        On the first failure the remaining downloads are cancelled and the
        error that completed first is raised.
        """
        failures: List[BaseException] = []

        def record_failure(task: asyncio.Future):
            if not task.cancelled() and task.exception() is not None:
                failures.append(task.exception())

        tasks = [asyncio.ensure_future(coro) for coro in coros]
        for task in tasks:
            task.add_done_callback(record_failure)
        if not tasks:
            return []
        try:
            _, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        except asyncio.CancelledError:
            for task in tasks:
                task.cancel()
            raise
        if pending:
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
        if failures:
            raise failures[0]
        return [task.result() for task in tasks]

    def library_path(self, artifact_path: str) -> Path:
        return self.libraries_dir.joinpath(*artifact_path.split("/"))

    async def download_libraries(self, metadata: VersionMetadata, context: RuntimeContext) -> List[Path]:
        """Download every library selected for ``context``.

        Returns the library paths in descriptor order, which is the
        classpath order.
        """
        jobs: List[Tuple[str, Path, str]] = []
        for lib in metadata.libraries:
            if not library_allowed(lib.rules, context):
                logger.debug("Skipping library %s: excluded by rules", lib.name)
                continue
            artifact = lib.artifact
            if artifact is None or not artifact.is_complete:
                continue
            url = self.mirror.rewrite(artifact.url, ArtifactKind.LIBRARY)
            jobs.append((url, self.library_path(artifact.path), artifact.sha1))

        logger.info("Installing %d libraries", len(jobs))
        self.libraries_dir.mkdir(parents=True, exist_ok=True)
        return await self.gather_all(self.download_file(url, dest, sha1) for url, dest, sha1 in jobs)

    def version_jar_path(self, version_id: str) -> Path:
        return self.versions_dir / version_id / f"{version_id}.jar"

    async def download_version_jar(self, metadata: VersionMetadata) -> Path:
        """Download the client JAR."""
        client = metadata.downloads.client if metadata.downloads else None
        if client is None or not client.url or not client.sha1:
            raise NotObject("downloads.client")
        url = self.mirror.rewrite(client.url, ArtifactKind.CLIENT)
        logger.info("Installing client %s", metadata.id)
        return await self.download_file(url, self.version_jar_path(metadata.id), client.sha1)

    async def download_asset_index(self, metadata: VersionMetadata) -> AssetIndex:
        """Download, verify and persist the asset index JSON."""
        ref = metadata.assetIndex
        if ref is None:
            raise NotObject("assetIndex")
        url = self.mirror.rewrite(ref.url, ArtifactKind.VERSION)
        data = await self.fetch_verified(url, ref.sha1)
        raw = load_json(data, url)
        asset_index = parse_asset_index(raw, url)
        await write_json(self.assets_dir / "indexes" / f"{ref.id}.json", raw)
        return asset_index

    async def download_assets(self, asset_index: Union[AssetIndex, Dict[str, Any]]) -> List[Path]:
        """Download all assets from index.

        The objects directory is deleted first and fully repopulated, so
        objects dropped upstream disappear from disk as well.
        """
        if not isinstance(asset_index, AssetIndex):
            asset_index = parse_asset_index(asset_index)

        objects_dir = self.assets_dir / "objects"
        if objects_dir.exists():
            logger.info("Removing %s before resync", objects_dir)
            shutil.rmtree(objects_dir)
        virtual_dir = self.assets_dir / "virtual" / "legacy" if asset_index.map_to_resources else None

        logger.info("Installing %d asset objects", len(asset_index.objects))
        return await self.gather_all(
            self._download_asset(name, obj.hash, objects_dir, virtual_dir)
            for name, obj in asset_index.objects.items()
        )

    async def _download_asset(self, name: str, hash_code: str, objects_dir: Path,
                              virtual_dir: Optional[Path]) -> Path:
        dest = objects_dir / hash_code[:2] / hash_code
        dest = await self.download_file(self.mirror.asset_object_url(hash_code), dest, hash_code)
        if virtual_dir is not None:
            async with aiofiles.open(dest, 'rb') as f:
                data = await f.read()
            await write_bytes(virtual_dir.joinpath(*name.split("/")), data)
        return dest
