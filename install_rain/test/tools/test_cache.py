"""Tests for install_rain.tools.cache module."""

import json
from pathlib import Path

import pytest

from install_rain.core.result import Err, Ok
from install_rain.tools.cache import ToolCache

KEY = "rain-cache-1.24.2-linux-x64"


@pytest.fixture
def install_dir(tmp_path: Path) -> Path:
    path = tmp_path / "temp" / "rain-1.24.2"
    path.mkdir(parents=True)
    (path / "rain").write_bytes(b"binary")
    return path


class TestSave:
    def test_creates_entry(self, tmp_path: Path, install_dir: Path) -> None:
        cache = ToolCache(tmp_path / "cache")

        assert cache.save(install_dir, KEY) == Ok(None)

        entry_dir = tmp_path / "cache" / KEY
        assert (entry_dir / "payload" / "rain").read_bytes() == b"binary"
        entry = json.loads((entry_dir / "entry.json").read_text(encoding="utf-8"))
        assert entry["key"] == KEY
        assert entry["source"] == str(install_dir)
        assert cache.has(KEY)

    def test_existing_key_is_refused(self, tmp_path: Path, install_dir: Path) -> None:
        cache = ToolCache(tmp_path / "cache")
        cache.save(install_dir, KEY)

        result = cache.save(install_dir, KEY)

        assert isinstance(result, Err)
        assert result.error.message.startswith("Unable to reserve cache")

    def test_missing_path(self, tmp_path: Path) -> None:
        result = ToolCache(tmp_path / "cache").save(tmp_path / "nope", KEY)

        assert isinstance(result, Err)
        assert not ToolCache(tmp_path / "cache").has(KEY)

    def test_leaves_no_staging_directories(self, tmp_path: Path, install_dir: Path) -> None:
        root = tmp_path / "cache"
        ToolCache(root).save(install_dir, KEY)

        assert [p.name for p in root.iterdir()] == [KEY]


class TestRestore:
    def test_miss(self, tmp_path: Path) -> None:
        result = ToolCache(tmp_path / "cache").restore(tmp_path / "dest", KEY)

        assert result == Ok(False)
        assert not (tmp_path / "dest").exists()

    def test_hit(self, tmp_path: Path, install_dir: Path) -> None:
        cache = ToolCache(tmp_path / "cache")
        cache.save(install_dir, KEY)
        dest = tmp_path / "elsewhere" / "rain-1.24.2"

        assert cache.restore(dest, KEY) == Ok(True)
        assert (dest / "rain").read_bytes() == b"binary"

    def test_corrupted_entry(self, tmp_path: Path) -> None:
        entry_dir = tmp_path / "cache" / KEY
        (entry_dir / "payload").mkdir(parents=True)
        (entry_dir / "entry.json").write_text("{not json", encoding="utf-8")

        result = ToolCache(tmp_path / "cache").restore(tmp_path / "dest", KEY)

        assert isinstance(result, Err)
        assert "Corrupted cache entry" in result.error.message

    def test_entry_without_payload(self, tmp_path: Path) -> None:
        entry_dir = tmp_path / "cache" / KEY
        entry_dir.mkdir(parents=True)
        (entry_dir / "entry.json").write_text("{}", encoding="utf-8")

        result = ToolCache(tmp_path / "cache").restore(tmp_path / "dest", KEY)

        assert isinstance(result, Err)


class TestKeys:
    def test_invalid_characters(self, tmp_path: Path, install_dir: Path) -> None:
        cache = ToolCache(tmp_path / "cache")

        assert isinstance(cache.save(install_dir, "../escape"), Err)
        assert isinstance(cache.restore(install_dir, "a,b"), Err)

    def test_too_long(self, tmp_path: Path, install_dir: Path) -> None:
        result = ToolCache(tmp_path / "cache").save(install_dir, "k" * 513)

        assert isinstance(result, Err)
        assert "512" in result.error.message
