"""Shared fixtures: an in-memory HTTP client and a small fake version."""

import hashlib
import json
from typing import Callable, Dict, Optional

import pytest

from craftlaunch.errors import TransportError
from craftlaunch.versions.rules import RuntimeContext

MANIFEST_URL = "https://launchermeta.mojang.com/mc/game/version_manifest_v2.json"
DESCRIPTOR_URL = "https://piston-meta.mojang.com/v1/packages/abc/1.20.json"
ASSET_INDEX_URL = "https://piston-meta.mojang.com/v1/packages/def/5.json"
CLIENT_URL = "https://piston-data.mojang.com/v1/objects/123/client.jar"


def sha1(data: bytes) -> str:
    return hashlib.sha1(data).hexdigest()


class FakeHTTPClient:
    def __init__(self, routes: Optional[Dict[str, bytes]] = None,
                 on_post: Optional[Callable[[str, dict], dict]] = None):
        self.routes = dict(routes or {})
        self.on_post = on_post
        self.fetched = []
        self.posted = []

    async def fetch(self, url: str) -> bytes:
        self.fetched.append(url)
        if url not in self.routes:
            raise TransportError(url, "404 Not Found")
        return self.routes[url]

    async def post(self, url: str, json_data=None, headers=None) -> bytes:
        self.posted.append((url, json_data, headers))
        return json.dumps(self.on_post(url, json_data)).encode()


@pytest.fixture
def linux_context():
    return RuntimeContext(os_name="linux", arch="amd64")


@pytest.fixture
def windows_context():
    return RuntimeContext(os_name="windows", arch="amd64")


LIB_A = b"library a bytes"
LIB_B = b"library b bytes"
LIB_WIN = b"windows only natives"
CLIENT_JAR = b"client jar bytes"
ICON = b"icon png bytes"
SOUND = b"sound ogg bytes"


def build_descriptor() -> dict:
    return {
        "id": "1.20",
        "type": "release",
        "mainClass": "net.minecraft.client.main.Main",
        "complianceLevel": 1,
        "javaVersion": {"component": "java-runtime-gamma", "majorVersion": 17},
        "assetIndex": {"id": "5", "sha1": sha1(build_asset_index_bytes()), "url": ASSET_INDEX_URL},
        "downloads": {"client": {"url": CLIENT_URL, "sha1": sha1(CLIENT_JAR), "size": len(CLIENT_JAR)}},
        "libraries": [
            {
                "name": "com.example:a:1.0",
                "downloads": {"artifact": {
                    "path": "com/example/a/1.0/a-1.0.jar",
                    "url": "https://libraries.minecraft.net/com/example/a/1.0/a-1.0.jar",
                    "sha1": sha1(LIB_A),
                }},
            },
            {
                "name": "com.example:win:1.0",
                "rules": [{"action": "allow", "os": {"name": "windows"}}],
                "downloads": {"artifact": {
                    "path": "com/example/win/1.0/win-1.0.jar",
                    "url": "https://libraries.minecraft.net/com/example/win/1.0/win-1.0.jar",
                    "sha1": sha1(LIB_WIN),
                }},
            },
            {"name": "com.example:noartifact:1.0"},
            {
                "name": "com.example:b:1.0",
                "downloads": {"artifact": {
                    "path": "com/example/b/1.0/b-1.0.jar",
                    "url": "https://libraries.minecraft.net/com/example/b/1.0/b-1.0.jar",
                    "sha1": sha1(LIB_B),
                }},
            },
        ],
        "arguments": {
            "game": [
                "--username", "${auth_player_name}",
                "--version", "${version_name}",
                "--gameDir", "${game_directory}",
                "--assetIndex", "${assets_index_name}",
                "--uuid", "${auth_uuid}",
                "--accessToken", "${auth_access_token}",
                {"rules": [{"action": "allow", "features": {"is_demo_user": True}}], "value": "--demo"},
                {"rules": [{"action": "allow", "features": {"has_custom_resolution": True}}],
                 "value": ["--width", "${resolution_width}", "--height", "${resolution_height}"]},
            ],
            "jvm": [
                {"rules": [{"action": "allow", "os": {"name": "osx"}}], "value": ["-XstartOnFirstThread"]},
                {"rules": [{"action": "allow", "os": {"name": "windows"}}],
                 "value": "-XX:HeapDumpPath=MojangTricksIntelDriversForPerformance_javaw.exe_minecraft.exe.heapdump"},
                "-Djava.library.path=${natives_directory}",
                "-Dminecraft.launcher.brand=${launcher_name}",
                "-cp",
                "${classpath}",
            ],
        },
    }


def build_asset_index() -> dict:
    return {
        "objects": {
            "icons/icon.png": {"hash": sha1(ICON), "size": len(ICON)},
            "sounds/click.ogg": {"hash": sha1(SOUND), "size": len(SOUND)},
        }
    }


def build_asset_index_bytes() -> bytes:
    return json.dumps(build_asset_index()).encode()


def build_routes(descriptor: Optional[dict] = None) -> Dict[str, bytes]:
    descriptor_bytes = json.dumps(descriptor or build_descriptor()).encode()
    manifest = {
        "latest": {"release": "1.20", "snapshot": "1.20"},
        "versions": [
            {"id": "1.19", "type": "release", "url": "https://piston-meta.mojang.com/v1/packages/0/1.19.json",
             "sha1": "0" * 40},
            {"id": "1.20", "type": "release", "url": DESCRIPTOR_URL, "sha1": sha1(descriptor_bytes)},
        ],
    }
    icon_hash, sound_hash = sha1(ICON), sha1(SOUND)
    return {
        MANIFEST_URL: json.dumps(manifest).encode(),
        DESCRIPTOR_URL: descriptor_bytes,
        ASSET_INDEX_URL: build_asset_index_bytes(),
        CLIENT_URL: CLIENT_JAR,
        "https://libraries.minecraft.net/com/example/a/1.0/a-1.0.jar": LIB_A,
        "https://libraries.minecraft.net/com/example/b/1.0/b-1.0.jar": LIB_B,
        "https://libraries.minecraft.net/com/example/win/1.0/win-1.0.jar": LIB_WIN,
        f"https://resources.download.minecraft.net/{icon_hash[:2]}/{icon_hash}": ICON,
        f"https://resources.download.minecraft.net/{sound_hash[:2]}/{sound_hash}": SOUND,
    }


@pytest.fixture
def routes():
    return build_routes()


@pytest.fixture
def fake_client(routes):
    return FakeHTTPClient(routes)
