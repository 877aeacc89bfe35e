import asyncio

import pytest

from infrastructure.external.storage import (
    NotFoundError,
    StorageConfig,
    ValidationError,
    create_provider,
    safe_join,
)
from infrastructure.external.storage.providers.local import LocalProvider


@pytest.fixture
def base_dir(tmp_path):
    path = tmp_path / "store"
    path.mkdir()
    return path


@pytest.fixture
def provider(base_dir):
    return LocalProvider(StorageConfig(local_base_path=str(base_dir)))


def _visible(base_dir):
    return sorted(p.name for p in base_dir.iterdir())


@pytest.mark.asyncio
async def test_commit_publishes_file_atomically(provider, base_dir):
    writer = await provider.open_writer("a.png")
    await writer.write(b"hello ")
    await writer.write(b"world")

    # Only the hidden temp file exists before commit
    names = _visible(base_dir)
    assert len(names) == 1 and names[0].startswith(".") and names[0].endswith(".part")

    result = await writer.commit()
    assert result.key == "a.png"
    assert result.size == 11
    assert result.content_type == "image/png"
    assert _visible(base_dir) == ["a.png"]
    assert (base_dir / "a.png").read_bytes() == b"hello world"


@pytest.mark.asyncio
async def test_abort_removes_partial_file(provider, base_dir):
    writer = await provider.open_writer("b.png")
    await writer.write(b"partial")
    await writer.abort()
    await writer.abort()
    assert _visible(base_dir) == []


@pytest.mark.asyncio
async def test_list_objects_skips_directories(provider, base_dir):
    (base_dir / "one.png").write_bytes(b"1")
    (base_dir / "two.txt").write_bytes(b"22")
    (base_dir / "nested").mkdir()

    objects = {obj.key: obj for obj in await provider.list_objects()}
    assert set(objects) == {"one.png", "two.txt"}
    assert objects["two.txt"].size == 2
    assert objects["one.png"].last_modified.tzinfo is not None


@pytest.mark.asyncio
async def test_delete_returns_false_when_missing(provider, base_dir):
    (base_dir / "gone.png").write_bytes(b"x")
    assert await provider.delete("gone.png") is True
    assert await provider.delete("gone.png") is False


@pytest.mark.asyncio
async def test_concurrent_deletes_only_one_wins(provider, base_dir):
    (base_dir / "race.png").write_bytes(b"x")
    results = await asyncio.gather(*(provider.delete("race.png") for _ in range(5)))
    assert sorted(results) == [False, False, False, False, True]


@pytest.mark.asyncio
async def test_stream_download_and_metadata(provider, base_dir):
    payload = bytes(range(256)) * 1000
    (base_dir / "big.gif").write_bytes(payload)

    meta = await provider.get_metadata("big.gif")
    assert meta.size == len(payload)

    chunks = [chunk async for chunk in provider.stream_download("big.gif", chunk_size=4096)]
    assert b"".join(chunks) == payload
    assert max(len(c) for c in chunks) <= 4096


@pytest.mark.asyncio
async def test_missing_file_raises_not_found(provider):
    with pytest.raises(NotFoundError):
        await provider.get_metadata("nope.png")
    with pytest.raises(NotFoundError):
        async for _ in provider.stream_download("nope.png"):
            pass


@pytest.mark.asyncio
async def test_directory_is_not_a_file(provider, base_dir):
    (base_dir / "dir.png").mkdir()
    with pytest.raises(NotFoundError):
        await provider.get_metadata("dir.png")


@pytest.mark.parametrize("key", ["", "../escape.png", "a/b.png", "bad\x00.png", ".."])
def test_safe_join_rejects_keys_outside_base(base_dir, key):
    with pytest.raises(ValidationError):
        safe_join(base_dir.resolve(), key)


@pytest.mark.asyncio
async def test_delete_traversal_never_touches_outside(provider, base_dir, tmp_path):
    outside = tmp_path / "outside.png"
    outside.write_bytes(b"keep")
    with pytest.raises(ValidationError):
        await provider.delete("../outside.png")
    assert outside.read_bytes() == b"keep"


@pytest.mark.asyncio
async def test_factory_builds_local_provider(base_dir):
    provider = await create_provider(StorageConfig(local_base_path=str(base_dir)))
    assert isinstance(provider, LocalProvider)
    assert await provider.health_check() is True
    assert _visible(base_dir) == []
