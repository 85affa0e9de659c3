"""Tests for artifact download, library and asset installation."""

import asyncio
import json

import pytest

from conftest import (ASSET_INDEX_URL, CLIENT_JAR, CLIENT_URL, ICON, LIB_A, LIB_B, SOUND,
                      FakeHTTPClient, build_descriptor, sha1)
from craftlaunch.errors import HashMismatch, NotObject, TransportError
from craftlaunch.versions import DownloadManager, Source
from craftlaunch.versions.models import parse_metadata


@pytest.fixture
def metadata():
    return parse_metadata(build_descriptor())


@pytest.mark.asyncio
async def test_download_file_verifies_and_persists(tmp_path):
    client = FakeHTTPClient({"https://host/file": b"payload"})
    dest = tmp_path / "deep" / "dir" / "file"
    manager = DownloadManager(client, tmp_path)

    assert await manager.download_file("https://host/file", dest, sha1(b"payload")) == dest
    assert dest.read_bytes() == b"payload"


@pytest.mark.asyncio
async def test_hash_mismatch_writes_nothing(tmp_path):
    client = FakeHTTPClient({"https://host/file": b"tampered"})
    dest = tmp_path / "file"
    with pytest.raises(HashMismatch):
        await DownloadManager(client, tmp_path).download_file("https://host/file", dest, sha1(b"payload"))
    assert not dest.exists()


@pytest.mark.asyncio
async def test_verified_file_is_not_fetched_again(tmp_path):
    client = FakeHTTPClient({"https://host/file": b"payload"})
    dest = tmp_path / "file"
    dest.write_bytes(b"payload")
    await DownloadManager(client, tmp_path).download_file("https://host/file", dest, sha1(b"payload"))
    assert client.fetched == []


@pytest.mark.asyncio
async def test_corrupted_file_is_fetched_again(tmp_path):
    client = FakeHTTPClient({"https://host/file": b"payload"})
    dest = tmp_path / "file"
    dest.write_bytes(b"payl")
    await DownloadManager(client, tmp_path).download_file("https://host/file", dest, sha1(b"payload"))
    assert client.fetched == ["https://host/file"]
    assert dest.read_bytes() == b"payload"


@pytest.mark.asyncio
async def test_same_destination_downloaded_once(tmp_path):
    client = FakeHTTPClient({"https://host/file": b"payload"})
    manager = DownloadManager(client, tmp_path)
    dest = tmp_path / "file"
    results = await asyncio.gather(*(
        manager.download_file("https://host/file", dest, sha1(b"payload")) for _ in range(3)
    ))
    assert results == [dest, dest, dest]
    assert client.fetched == ["https://host/file"]


@pytest.mark.asyncio
async def test_same_destination_with_other_hash_is_checked(tmp_path):
    client = FakeHTTPClient({"https://host/a": b"first", "https://host/b": b"second"})
    manager = DownloadManager(client, tmp_path, concurrent_downloads=1)
    dest = tmp_path / "file"
    results = await manager.gather_all([
        manager.download_file("https://host/a", dest, sha1(b"first")),
        manager.download_file("https://host/b", dest, sha1(b"second")),
    ])
    assert results == [dest, dest]
    assert client.fetched == ["https://host/a", "https://host/b"]
    assert dest.read_bytes() == b"second"


@pytest.mark.asyncio
async def test_same_destination_with_bad_bytes_fails(tmp_path):
    client = FakeHTTPClient({"https://host/a": b"first", "https://host/b": b"tampered"})
    manager = DownloadManager(client, tmp_path)
    dest = tmp_path / "file"
    with pytest.raises(HashMismatch):
        await manager.gather_all([
            manager.download_file("https://host/a", dest, sha1(b"first")),
            manager.download_file("https://host/b", dest, sha1(b"second")),
        ])
    assert dest.read_bytes() == b"first"


@pytest.mark.asyncio
async def test_error_raised_is_the_first_to_complete(tmp_path):
    class Client:
        async def fetch(self, url):
            if url.endswith("late"):
                await asyncio.sleep(0)
                raise TransportError(url, "late")
            raise TransportError(url, "early")

    manager = DownloadManager(Client(), tmp_path)
    with pytest.raises(TransportError) as info:
        await manager.gather_all([
            manager.download_file("https://host/late", tmp_path / "late", sha1(b"")),
            manager.download_file("https://host/early", tmp_path / "early", sha1(b"")),
        ])
    assert info.value.url == "https://host/early"


@pytest.mark.asyncio
async def test_libraries_in_descriptor_order(tmp_path, fake_client, metadata, linux_context):
    manager = DownloadManager(fake_client, tmp_path, concurrent_downloads=4)
    paths = await manager.download_libraries(metadata, linux_context)

    libraries = tmp_path / "libraries"
    assert paths == [
        libraries / "com" / "example" / "a" / "1.0" / "a-1.0.jar",
        libraries / "com" / "example" / "b" / "1.0" / "b-1.0.jar",
    ]
    assert paths[0].read_bytes() == LIB_A
    assert paths[1].read_bytes() == LIB_B
    assert not (libraries / "com" / "example" / "win").exists()


@pytest.mark.asyncio
async def test_windows_library_included_on_windows(tmp_path, fake_client, metadata, windows_context):
    paths = await DownloadManager(fake_client, tmp_path).download_libraries(metadata, windows_context)
    assert [p.name for p in paths] == ["a-1.0.jar", "win-1.0.jar", "b-1.0.jar"]


@pytest.mark.asyncio
async def test_library_order_does_not_depend_on_completion(tmp_path, routes, metadata, linux_context):
    class SlowFirstClient(FakeHTTPClient):
        async def fetch(self, url):
            if url.endswith("a-1.0.jar"):
                await asyncio.sleep(0.05)
            return await super().fetch(url)

    paths = await DownloadManager(SlowFirstClient(routes), tmp_path).download_libraries(metadata, linux_context)
    assert [p.name for p in paths] == ["a-1.0.jar", "b-1.0.jar"]


@pytest.mark.asyncio
async def test_library_mirror(tmp_path, routes, metadata, linux_context):
    mirrored = {
        url.replace("https://libraries.minecraft.net", "https://bmclapi2.bangbang93.com/maven"): data
        for url, data in routes.items()
    }
    client = FakeHTTPClient(mirrored)
    await DownloadManager(client, tmp_path, Source.BMCLAPI).download_libraries(metadata, linux_context)
    assert client.fetched and all(url.startswith("https://bmclapi2.bangbang93.com/maven/") for url in client.fetched)


@pytest.mark.asyncio
async def test_library_failure_aborts(tmp_path, routes, metadata, linux_context):
    del routes["https://libraries.minecraft.net/com/example/b/1.0/b-1.0.jar"]
    with pytest.raises(TransportError):
        await DownloadManager(FakeHTTPClient(routes), tmp_path).download_libraries(metadata, linux_context)


@pytest.mark.asyncio
async def test_first_failure_cancels_pending(tmp_path, linux_context):
    started = []

    class Client:
        async def fetch(self, url):
            started.append(url)
            if url.endswith("bad"):
                raise TransportError(url, "boom")
            await asyncio.sleep(10)
            return b""

    manager = DownloadManager(Client(), tmp_path)
    with pytest.raises(TransportError):
        await asyncio.wait_for(manager.gather_all([
            manager.download_file("https://host/slow", tmp_path / "slow", sha1(b"")),
            manager.download_file("https://host/bad", tmp_path / "bad", sha1(b"")),
        ]), timeout=5)
    assert not (tmp_path / "slow").exists()


@pytest.mark.asyncio
async def test_client_jar(tmp_path, fake_client, metadata):
    path = await DownloadManager(fake_client, tmp_path).download_version_jar(metadata)
    assert path == tmp_path / "versions" / "1.20" / "1.20.jar"
    assert path.read_bytes() == CLIENT_JAR
    assert fake_client.fetched == [CLIENT_URL]


@pytest.mark.asyncio
async def test_client_jar_missing(tmp_path, fake_client):
    descriptor = build_descriptor()
    del descriptor["downloads"]
    with pytest.raises(NotObject):
        await DownloadManager(fake_client, tmp_path).download_version_jar(parse_metadata(descriptor))


@pytest.mark.asyncio
async def test_asset_index_persisted(tmp_path, fake_client, metadata):
    index = await DownloadManager(fake_client, tmp_path).download_asset_index(metadata)
    assert set(index.objects) == {"icons/icon.png", "sounds/click.ogg"}
    saved = json.loads((tmp_path / "assets" / "indexes" / "5.json").read_text())
    assert saved["objects"]["icons/icon.png"]["hash"] == sha1(ICON)
    assert fake_client.fetched == [ASSET_INDEX_URL]


@pytest.mark.asyncio
async def test_assets_content_addressed(tmp_path, fake_client):
    icon_hash = sha1(ICON)
    index = {"objects": {"a/b.png": {"hash": icon_hash, "size": len(ICON)}}}
    paths = await DownloadManager(fake_client, tmp_path).download_assets(index)

    expected = tmp_path / "assets" / "objects" / icon_hash[:2] / icon_hash
    assert paths == [expected]
    assert expected.read_bytes() == ICON
    assert fake_client.fetched == [f"https://resources.download.minecraft.net/{icon_hash[:2]}/{icon_hash}"]
    assert not (tmp_path / "assets" / "virtual").exists()


@pytest.mark.asyncio
async def test_assets_resync_removes_stale_objects(tmp_path, fake_client):
    stale = tmp_path / "assets" / "objects" / "ff" / "ff00"
    stale.parent.mkdir(parents=True)
    stale.write_bytes(b"stale")

    index = {"objects": {"sounds/click.ogg": {"hash": sha1(SOUND), "size": len(SOUND)}}}
    await DownloadManager(fake_client, tmp_path).download_assets(index)
    assert not stale.exists()


@pytest.mark.asyncio
async def test_legacy_virtual_assets(tmp_path, fake_client):
    index = {
        "map_to_resources": True,
        "objects": {
            "icons/icon.png": {"hash": sha1(ICON), "size": len(ICON)},
            "icons/copy.png": {"hash": sha1(ICON), "size": len(ICON)},
        },
    }
    await DownloadManager(fake_client, tmp_path).download_assets(index)
    legacy = tmp_path / "assets" / "virtual" / "legacy" / "icons"
    assert (legacy / "icon.png").read_bytes() == ICON
    assert (legacy / "copy.png").read_bytes() == ICON


@pytest.mark.asyncio
async def test_asset_hash_mismatch(tmp_path):
    icon_hash = sha1(ICON)
    client = FakeHTTPClient({
        f"https://resources.download.minecraft.net/{icon_hash[:2]}/{icon_hash}": b"not the icon",
    })
    with pytest.raises(HashMismatch):
        await DownloadManager(client, tmp_path).download_assets(
            {"objects": {"icons/icon.png": {"hash": icon_hash, "size": 1}}}
        )
    assert not (tmp_path / "assets" / "objects" / icon_hash[:2] / icon_hash).exists()


@pytest.mark.asyncio
async def test_assets_without_objects(tmp_path, fake_client):
    with pytest.raises(NotObject):
        await DownloadManager(fake_client, tmp_path).download_assets({"objects": []})


@pytest.mark.asyncio
async def test_asset_index_not_json(tmp_path, routes):
    descriptor = build_descriptor()
    descriptor["assetIndex"]["sha1"] = sha1(b"not json")
    routes[ASSET_INDEX_URL] = b"not json"
    with pytest.raises(NotObject) as info:
        await DownloadManager(FakeHTTPClient(routes), tmp_path).download_asset_index(parse_metadata(descriptor))
    assert info.value.url == ASSET_INDEX_URL
    assert not (tmp_path / "assets" / "indexes" / "5.json").exists()


@pytest.mark.asyncio
async def test_asset_object_without_hash(tmp_path, fake_client):
    with pytest.raises(NotObject) as info:
        await DownloadManager(fake_client, tmp_path).download_assets({"objects": {"a/b.png": {"size": 1}}})
    assert info.value.path.startswith("objects")
