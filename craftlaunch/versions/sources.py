"""Download sources and mirror URL rewriting."""

from enum import Enum
from typing import Dict, Optional, Tuple


class ArtifactKind(str, Enum):
    MANIFEST = "manifest"
    VERSION = "version"
    LIBRARY = "library"
    CLIENT = "client"
    ASSET = "asset"


class Source(str, Enum):
    MOJANG = "mojang"
    MCBBS = "mcbbs"
    BMCLAPI = "bmclapi"

    @classmethod
    def from_name(cls, name: Optional[str]) -> "Source":
        """Parse a source name, falling back to the canonical source."""
        try:
            return cls((name or "").lower())
        except ValueError:
            return cls.MOJANG

    @property
    def is_canonical(self) -> bool:
        return self is Source.MOJANG


CANONICAL_MANIFEST_URL = "https://launchermeta.mojang.com/mc/game/version_manifest_v2.json"
CANONICAL_ASSETS_URL = "https://resources.download.minecraft.net/"

_META_HOSTS = (
    "https://piston-meta.mojang.com",
    "https://launchermeta.mojang.com",
    "http://launchermeta.mojang.com",
    "https://launcher.mojang.com",
)
_CLIENT_HOSTS = (
    "https://piston-data.mojang.com",
    "https://launchermeta.mojang.com",
    "https://launcher.mojang.com",
)


def _mirror_table(root: str) -> Dict[ArtifactKind, Dict[str, str]]:
    return {
        ArtifactKind.MANIFEST: {host: root for host in _META_HOSTS},
        ArtifactKind.VERSION: {host: root for host in _META_HOSTS},
        ArtifactKind.LIBRARY: {"https://libraries.minecraft.net": f"{root}/maven"},
        ArtifactKind.CLIENT: {host: root for host in _CLIENT_HOSTS},
        ArtifactKind.ASSET: {"https://resources.download.minecraft.net": f"{root}/assets"},
    }


MIRROR_TABLES: Dict[Source, Dict[ArtifactKind, Dict[str, str]]] = {
    Source.MOJANG: {kind: {} for kind in ArtifactKind},
    Source.MCBBS: _mirror_table("https://download.mcbbs.net"),
    Source.BMCLAPI: _mirror_table("https://bmclapi2.bangbang93.com"),
}


class MirrorSource:
    """Rewrites canonical upstream URLs to the hosts of one source.

    Only URL prefixes are substituted, longest prefix first, and the rest
    of the URL is left untouched. Mirror hosts are never keys of a table,
    so rewriting an already rewritten URL changes nothing.
    """

    def __init__(self, source: Source, tables: Optional[Dict[ArtifactKind, Dict[str, str]]] = None):
        self.source = source
        tables = MIRROR_TABLES[source] if tables is None else tables
        self._prefixes: Dict[Optional[ArtifactKind], Tuple[Tuple[str, str], ...]] = {
            kind: self._sorted(mapping) for kind, mapping in tables.items()
        }
        merged: Dict[str, str] = {}
        for mapping in tables.values():
            for prefix, target in mapping.items():
                merged.setdefault(prefix, target)
        self._prefixes[None] = self._sorted(merged)

    @staticmethod
    def _sorted(mapping: Dict[str, str]) -> Tuple[Tuple[str, str], ...]:
        return tuple(sorted(mapping.items(), key=lambda item: len(item[0]), reverse=True))

    def rewrite(self, url: str, kind: Optional[ArtifactKind] = None) -> str:
        """Return ``url`` with its canonical host replaced by this source's mirror."""
        for prefix, target in self._prefixes.get(kind, ()):
            if url.startswith(prefix):
                return target + url[len(prefix):]
        return url

    def manifest_url(self) -> str:
        return self.rewrite(CANONICAL_MANIFEST_URL, ArtifactKind.MANIFEST)

    def asset_object_url(self, hash_code: str) -> str:
        return self.rewrite(f"{CANONICAL_ASSETS_URL}{hash_code[:2]}/{hash_code}", ArtifactKind.ASSET)


def rewrite(source: Source, url: str, kind: Optional[ArtifactKind] = None) -> str:
    return MirrorSource(source).rewrite(url, kind)
