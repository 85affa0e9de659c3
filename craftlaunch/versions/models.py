"""Data models for Minecraft versions."""

import json

from pydantic import BaseModel, Field, ValidationError, field_validator
from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from datetime import datetime

from ..errors import NotArray, NotObject


class DownloadInfo(BaseModel):
    url: Optional[str] = None
    sha1: Optional[str] = None
    size: Optional[int] = None


class VersionDownloads(BaseModel):
    client: Optional[DownloadInfo] = None
    server: Optional[DownloadInfo] = None


class RuleOs(BaseModel):
    name: Optional[str] = None
    version: Optional[str] = None
    arch: Optional[str] = None


class Rule(BaseModel):
    action: Optional[str] = None
    os: Optional[RuleOs] = None
    features: Optional[Dict[str, bool]] = None

    @property
    def is_allow(self) -> bool:
        # A rule without an action is treated like "allow".
        return self.action is None or self.action == "allow"


class LibraryArtifact(BaseModel):
    path: Optional[str] = None
    sha1: Optional[str] = None
    size: Optional[Union[int, str]] = None
    url: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return bool(self.path and self.url and self.sha1)


class LibraryDownloads(BaseModel):
    artifact: Optional[LibraryArtifact] = None
    classifiers: Optional[Dict[str, LibraryArtifact]] = None


class Library(BaseModel):
    name: Optional[str] = None
    downloads: Optional[LibraryDownloads] = None
    rules: Optional[List[Rule]] = None

    @property
    def artifact(self) -> Optional[LibraryArtifact]:
        return self.downloads.artifact if self.downloads else None


class LiteralArgument(BaseModel):
    kind: Literal["literal"] = "literal"
    value: str

    def tokens(self) -> List[str]:
        return [self.value]


class ConditionalArgument(BaseModel):
    kind: Literal["conditional"] = "conditional"
    rules: List[Rule] = Field(default_factory=list)
    value: List[str]

    @field_validator("value", mode="before")
    @classmethod
    def _scalar_to_list(cls, value):
        if isinstance(value, str):
            return [value]
        return value

    def tokens(self) -> List[str]:
        return list(self.value)


Argument = Annotated[Union[LiteralArgument, ConditionalArgument], Field(discriminator="kind")]


class Arguments(BaseModel):
    game: List[Argument] = Field(default_factory=list)
    jvm: List[Argument] = Field(default_factory=list)

    @field_validator("game", "jvm", mode="before")
    @classmethod
    def _tag_entries(cls, entries):
        """Tag raw JSON entries: plain strings are literals, objects are conditional."""
        if entries is None:
            return []
        tagged = []
        for entry in entries:
            if isinstance(entry, str):
                tagged.append({"kind": "literal", "value": entry})
            elif isinstance(entry, dict) and "kind" not in entry:
                tagged.append({"kind": "conditional", **entry})
            else:
                tagged.append(entry)
        return tagged


class AssetIndexRef(BaseModel):
    id: str
    sha1: str
    url: str
    size: Optional[int] = None
    totalSize: Optional[int] = None


class JavaVersion(BaseModel):
    component: Optional[str] = None
    majorVersion: int = 8


class AssetObject(BaseModel):
    hash: str
    size: int = 0


class AssetIndex(BaseModel):
    objects: Dict[str, AssetObject] = Field(default_factory=dict)
    map_to_resources: bool = False
    virtual: bool = False


class VersionInfo(BaseModel):
    id: str
    url: str
    sha1: str
    type: Optional[str] = None
    time: Optional[datetime] = None
    releaseTime: Optional[datetime] = None
    complianceLevel: int = 0


class VersionManifest(BaseModel):
    latest: Dict[str, str] = Field(default_factory=dict)
    versions: List[VersionInfo]

    def find(self, version_id: str) -> Optional[VersionInfo]:
        for version in self.versions:
            if version.id == version_id:
                return version
        return None


class VersionMetadata(BaseModel):
    """Parsed version.json data."""
    id: str
    type: Optional[str] = None
    time: Optional[datetime] = None
    releaseTime: Optional[datetime] = None
    mainClass: Optional[str] = None
    javaVersion: JavaVersion = Field(default_factory=JavaVersion)
    assetIndex: Optional[AssetIndexRef] = None
    assets: Optional[str] = None
    downloads: Optional[VersionDownloads] = None
    libraries: List[Library] = Field(default_factory=list)
    arguments: Arguments = Field(default_factory=Arguments)
    complianceLevel: int = 0


def load_json(raw: bytes, url: Optional[str] = None) -> Any:
    """Decode a fetched JSON document."""
    try:
        return json.loads(raw)
    except ValueError as e:
        raise NotObject("$", url) from e


def _shape_error(error: ValidationError, url: Optional[str] = None):
    details = error.errors()[0]
    path = ".".join(str(part) for part in details["loc"]) or "$"
    if details["type"] == "list_type":
        return NotArray(path, url)
    return NotObject(path, url)


def parse_manifest(data, url: Optional[str] = None) -> VersionManifest:
    if not isinstance(data, dict):
        raise NotObject("$", url)
    if not isinstance(data.get("versions"), list):
        raise NotArray("versions", url)
    try:
        return VersionManifest.model_validate(data)
    except ValidationError as e:
        raise _shape_error(e, url) from e


def parse_metadata(data, url: Optional[str] = None) -> VersionMetadata:
    if not isinstance(data, dict):
        raise NotObject("$", url)
    if "libraries" in data and not isinstance(data["libraries"], list):
        raise NotArray("libraries", url)
    arguments = data.get("arguments")
    if arguments is not None:
        if not isinstance(arguments, dict):
            raise NotObject("arguments", url)
        for key in ("game", "jvm"):
            if key in arguments and not isinstance(arguments[key], list):
                raise NotArray(f"arguments.{key}", url)
    try:
        return VersionMetadata.model_validate(data)
    except ValidationError as e:
        raise _shape_error(e, url) from e


def parse_asset_index(data, url: Optional[str] = None) -> AssetIndex:
    if not isinstance(data, dict) or not isinstance(data.get("objects"), dict):
        raise NotObject("objects", url)
    try:
        return AssetIndex.model_validate(data)
    except ValidationError as e:
        raise _shape_error(e, url) from e
