import errno
import os
import time
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import patch

import pytest

from tests.support.vault_strategies import write_note
from vaultkeeper.core.config import HotPathsConfig, RecencyRule, ScannerConfig
from vaultkeeper.core.vault_scanner import (
    FileSource,
    HotPathScanner,
    ScanCache,
    ScanResult,
    VaultFile,
    categorize_files,
)


class FakeClock:
    """Wall clock that only moves when told to."""

    def __init__(self) -> None:
        self.now = time.time()

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def hot_paths() -> HotPathsConfig:
    return HotPathsConfig(
        always_scan=["TaskNotes", "01-Projects", "Calendar"],
        recency_scan=[RecencyRule("Emails", 14)],
        system_files=[
            "99-System/Claude-State.md",
            "99-System/Active-Projects.md",
            "99-System/Background-Tracking.md",
        ],
        excluded=["06-Career", ".obsidian"],
    )


@pytest.fixture
def vault(tmp_path: Path) -> Path:
    write_note(tmp_path / "TaskNotes" / "task-1.md")
    write_note(tmp_path / "TaskNotes" / "task-2.md")
    write_note(tmp_path / "01-Projects" / "drpa.md")
    write_note(tmp_path / "Calendar" / "meeting.md")
    write_note(tmp_path / "Emails" / "recent.md")
    write_note(tmp_path / "Emails" / "old.md", age_days=30)
    write_note(tmp_path / "99-System" / "Claude-State.md")
    write_note(tmp_path / "99-System" / "Active-Projects.md")
    write_note(tmp_path / "99-System" / "Background-Tracking.md")
    write_note(tmp_path / "06-Career" / "secret.md")
    return tmp_path


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def scanner(clock: FakeClock) -> HotPathScanner:
    return HotPathScanner(
        hot_paths=hot_paths(),
        scanner_config=ScannerConfig(cache_ttl_seconds=60, extension=".md"),
        clock=clock,
    )


def names(result: ScanResult, source: FileSource) -> set[str]:
    return {f.name for f in result.files if f.source is source}


@pytest.mark.asyncio
async def test_scans_always_directories(vault: Path, scanner: HotPathScanner) -> None:
    result = await scanner.scan(str(vault))

    assert names(result, FileSource.ALWAYS) == {"task-1", "task-2", "drpa", "meeting"}
    assert result.total_dirs == 4
    assert result.scan_duration_ms >= 0
    assert result.cached_at is None


@pytest.mark.asyncio
async def test_finds_system_files(vault: Path, scanner: HotPathScanner) -> None:
    result = await scanner.scan(str(vault))

    assert names(result, FileSource.SYSTEM) == {
        "Claude-State",
        "Active-Projects",
        "Background-Tracking",
    }


@pytest.mark.asyncio
async def test_recency_window_drops_old_files(vault: Path, scanner: HotPathScanner) -> None:
    result = await scanner.scan(str(vault))

    assert names(result, FileSource.RECENCY) == {"recent"}
    assert result.scanned_count == 8
    assert result.scanned_count == len(result.files)


@pytest.mark.asyncio
async def test_excluded_directories_are_not_scanned(vault: Path, clock: FakeClock) -> None:
    config = hot_paths()
    config.always_scan.append("06-Career")
    scanner = HotPathScanner(hot_paths=config, clock=clock)

    result = await scanner.scan(str(vault))

    assert all("06-Career" not in f.path for f in result.files)
    assert "secret" not in {f.name for f in result.files}


@pytest.mark.asyncio
async def test_records_carry_paths_and_metadata(vault: Path, scanner: HotPathScanner) -> None:
    result = await scanner.scan(str(vault))

    task = next(f for f in result.files if f.name == "task-1")
    assert task.relative_path == "TaskNotes/task-1.md"
    assert task.path.endswith("/TaskNotes/task-1.md")
    assert "\\" not in task.path
    assert task.size_bytes == len("note")
    assert task.modified_at.tzinfo is not None


@pytest.mark.asyncio
async def test_ignores_non_markdown_files(vault: Path, scanner: HotPathScanner) -> None:
    (vault / "TaskNotes" / "image.png").write_bytes(b"png")
    (vault / "TaskNotes" / "nested").mkdir()
    write_note(vault / "TaskNotes" / "nested" / "deep.md")

    result = await scanner.scan(str(vault))

    assert names(result, FileSource.ALWAYS) == {"task-1", "task-2", "drpa", "meeting"}


@pytest.mark.asyncio
async def test_bounded_scenario(tmp_path: Path, clock: FakeClock) -> None:
    """Two always files, one new and one old recency file: three results."""
    write_note(tmp_path / "TaskNotes" / "a.md")
    write_note(tmp_path / "TaskNotes" / "b.md")
    write_note(tmp_path / "Emails" / "new.md", age_days=1)
    write_note(tmp_path / "Emails" / "old.md", age_days=30)
    scanner = HotPathScanner(
        hot_paths=HotPathsConfig(
            always_scan=["TaskNotes"],
            recency_scan=[RecencyRule("Emails", 14)],
            system_files=[],
            excluded=[],
        ),
        clock=clock,
    )

    result = await scanner.scan(str(tmp_path))

    assert result.scanned_count == 3
    assert {f.name for f in result.files} == {"a", "b", "new"}


@pytest.mark.asyncio
async def test_missing_directories_are_not_errors(tmp_path: Path, scanner: HotPathScanner) -> None:
    result = await scanner.scan(str(tmp_path))

    assert result.scanned_count == 0
    assert result.files == ()
    assert result.skipped == ()


@pytest.mark.asyncio
async def test_unreadable_file_becomes_skip(vault: Path, scanner: HotPathScanner) -> None:
    real_stat = os.stat
    broken = str(vault / "TaskNotes" / "task-2.md")

    def flaky_stat(path, *args, **kwargs):
        if str(path) == broken:
            raise OSError(errno.EIO, "Input/output error")
        return real_stat(path, *args, **kwargs)

    with patch("vaultkeeper.core.vault_scanner.scanner.os.stat", side_effect=flaky_stat):
        result = await scanner.scan(str(vault))

    assert "task-2" not in {f.name for f in result.files}
    assert "task-1" in {f.name for f in result.files}
    assert [skip.path for skip in result.skipped] == [broken]
    assert "Input/output error" in result.skipped[0].reason


class TestCache:
    @pytest.mark.asyncio
    async def test_second_scan_within_ttl_is_cached(
        self, vault: Path, scanner: HotPathScanner, clock: FakeClock
    ) -> None:
        first = await scanner.scan(str(vault))
        clock.advance(30)
        write_note(vault / "TaskNotes" / "task-3.md")

        second = await scanner.scan(str(vault))

        assert second.cached_at is not None
        assert second.from_cache is True
        assert second.scanned_count == first.scanned_count
        assert "task-3" not in {f.name for f in second.files}

    @pytest.mark.asyncio
    async def test_invalidate_forces_rescan(
        self, vault: Path, scanner: HotPathScanner
    ) -> None:
        await scanner.scan(str(vault))
        write_note(vault / "TaskNotes" / "task-3.md")

        scanner.invalidate_cache()
        result = await scanner.scan(str(vault))

        assert result.cached_at is None
        assert "task-3" in {f.name for f in result.files}

    @pytest.mark.asyncio
    async def test_expired_entry_is_rescanned(
        self, vault: Path, scanner: HotPathScanner, clock: FakeClock
    ) -> None:
        await scanner.scan(str(vault))
        clock.advance(60)

        result = await scanner.scan(str(vault))

        assert result.cached_at is None

    @pytest.mark.asyncio
    async def test_other_root_misses_cache(
        self, vault: Path, tmp_path_factory: pytest.TempPathFactory, scanner: HotPathScanner
    ) -> None:
        other = tmp_path_factory.mktemp("other-vault")
        write_note(other / "TaskNotes" / "elsewhere.md")
        await scanner.scan(str(vault))

        result = await scanner.scan(str(other))

        assert result.cached_at is None
        assert {f.name for f in result.files} == {"elsewhere"}


def make_file(relative_path: str, modified_time: float = 0.0) -> VaultFile:
    return VaultFile(
        path=f"/vault/{relative_path}",
        name=relative_path.rsplit("/", 1)[-1][:-3],
        relative_path=relative_path,
        modified_time=modified_time,
        size_bytes=1,
        source=FileSource.ALWAYS,
    )


def test_categorize_files() -> None:
    files = [
        make_file("Emails/a.md"),
        make_file("TeamsChats/b.md"),
        make_file("Calendar/c.md"),
        make_file("01-Projects/Meeting Note d.md"),
        make_file("TaskNotes/e.md"),
        make_file("01-Projects/f.md"),
    ]

    result = categorize_files(files)

    assert [f.name for f in result["emails"]] == ["a"]
    assert [f.name for f in result["teams"]] == ["b"]
    assert [f.name for f in result["meetings"]] == ["c", "Meeting Note d"]
    assert [f.name for f in result["tasks"]] == ["e"]
    assert [f.name for f in result["other"]] == ["f"]


def test_categorize_files_since() -> None:
    now = datetime.now(timezone.utc)
    fresh = make_file("Emails/fresh.md", (now - timedelta(days=1)).timestamp())
    stale = make_file("Emails/stale.md", (now - timedelta(days=10)).timestamp())

    result = categorize_files([fresh, stale], since=now - timedelta(days=3))

    assert [f.name for f in result["emails"]] == ["fresh"]


@pytest.mark.asyncio
async def test_module_level_scan_and_invalidate(vault: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    import vaultkeeper.core.vault_scanner as vault_scanner

    monkeypatch.setattr(vault_scanner, "_default_scanner", HotPathScanner(hot_paths=hot_paths()))

    first = await vault_scanner.scan_vault(str(vault))
    second = await vault_scanner.scan_vault(str(vault))
    vault_scanner.invalidate_cache()
    third = await vault_scanner.scan_vault(str(vault))

    assert first.cached_at is None
    assert second.cached_at is not None
    assert third.cached_at is None


class TickingClock:
    """Wall clock that moves forward ten seconds on every read."""

    def __init__(self, start: float) -> None:
        self.now = start

    def __call__(self) -> float:
        value = self.now
        self.now += 10
        return value


@pytest.mark.asyncio
async def test_cached_at_is_the_scan_start_time(vault: Path) -> None:
    start = time.time()
    scanner = HotPathScanner(hot_paths=hot_paths(), clock=TickingClock(start))

    await scanner.scan(str(vault))
    cached = await scanner.scan(str(vault))

    assert cached.cached_at == datetime.fromtimestamp(start, tz=timezone.utc)


def test_cache_set_accepts_explicit_time() -> None:
    clock = FakeClock()
    cache = ScanCache(ttl_seconds=60, clock=clock)
    result = ScanResult(files=(), scanned_count=0, total_dirs=0, scan_duration_ms=0.0)

    cache.set("/vault", result, cached_time=clock.now - 30)

    assert cache.get("/vault").cached_at == datetime.fromtimestamp(
        clock.now - 30, tz=timezone.utc
    )
    clock.advance(30)
    assert cache.get("/vault") is None
