import asyncio
import hashlib
import time
from unittest.mock import MagicMock

from initwindow.core.icon_resolver import IconResolver, cache_key

EXE = r"C:\Program Files\App\app.exe"
PNG = b"\x89PNG\r\n\x1a\nfake-icon"


def test_cache_key_is_sha256_of_path():
    assert cache_key(EXE) == hashlib.sha256(EXE.encode("utf-8")).hexdigest()
    assert cache_key(EXE) != cache_key(r"D:\App\app.exe")


def test_second_resolve_is_cache_hit(tmp_path):
    extractor = MagicMock(return_value=PNG)
    resolver = IconResolver(tmp_path, extractor)

    first = asyncio.run(resolver.resolve(EXE))
    second = asyncio.run(resolver.resolve(EXE))

    assert first == second == str(tmp_path / f"{cache_key(EXE)}.png")
    assert extractor.call_count == 1
    assert (tmp_path / f"{cache_key(EXE)}.png").read_bytes() == PNG


def test_existing_cache_file_is_used_without_extraction(tmp_path):
    (tmp_path / f"{cache_key(EXE)}.png").write_bytes(b"old icon")
    extractor = MagicMock(return_value=PNG)
    resolver = IconResolver(tmp_path, extractor)

    assert asyncio.run(resolver.resolve(EXE)) == str(tmp_path / f"{cache_key(EXE)}.png")
    extractor.assert_not_called()


def test_no_icon_is_not_cached(tmp_path):
    extractor = MagicMock(return_value=None)
    resolver = IconResolver(tmp_path, extractor)

    assert asyncio.run(resolver.resolve(EXE)) is None
    assert list(tmp_path.iterdir()) == []


def test_extractor_error_becomes_no_icon(tmp_path):
    extractor = MagicMock(side_effect=OSError("access denied"))
    resolver = IconResolver(tmp_path, extractor)
    assert asyncio.run(resolver.resolve(EXE)) is None


def test_timeout_becomes_no_icon(tmp_path):
    def slow(path):
        time.sleep(0.3)
        return PNG

    resolver = IconResolver(tmp_path, slow, timeout=0.05)
    assert asyncio.run(resolver.resolve(EXE)) is None


def test_cache_dir_created_on_first_write(tmp_path):
    cache_dir = tmp_path / "nested" / "icons"
    resolver = IconResolver(cache_dir, lambda p: PNG)
    assert asyncio.run(resolver.resolve(EXE)) == str(cache_dir / f"{cache_key(EXE)}.png")


def test_concurrent_same_path_leaves_one_valid_file(tmp_path):
    resolver = IconResolver(tmp_path, lambda p: PNG)

    async def race():
        return await asyncio.gather(*(resolver.resolve(EXE) for _ in range(5)))

    results = asyncio.run(race())
    assert len(set(results)) == 1
    assert [p.name for p in tmp_path.iterdir()] == [f"{cache_key(EXE)}.png"]
    assert (tmp_path / f"{cache_key(EXE)}.png").read_bytes() == PNG


def test_different_paths_get_different_entries(tmp_path):
    resolver = IconResolver(tmp_path, lambda p: p.encode("utf-8"))
    other = r"D:\Portable\app.exe"

    async def both():
        return await asyncio.gather(resolver.resolve(EXE), resolver.resolve(other))

    a, b = asyncio.run(both())
    assert a != b
    assert open(a, "rb").read() == EXE.encode("utf-8")
    assert open(b, "rb").read() == other.encode("utf-8")
