import os
from datetime import datetime, timedelta
from pathlib import Path

from storeapps.infrastructure.observability import prune_log_files

NOW = datetime(2024, 6, 30, 12, 0, 0)


def _touch(path: Path, age: timedelta) -> Path:
    path.write_text("x", encoding="utf-8")
    ts = (NOW - age).timestamp()
    os.utime(path, (ts, ts))
    return path


def test_deletes_only_files_older_than_threshold(tmp_path):
    old = _touch(tmp_path / "run_old.txt", timedelta(days=31))
    recent = _touch(tmp_path / "run_recent.txt", timedelta(days=5))

    report = prune_log_files(tmp_path, timedelta(days=30), now=NOW)

    assert report.deleted == [old]
    assert not old.exists()
    assert recent.exists()
    assert report.cutoff == NOW - timedelta(days=30)


def test_file_exactly_at_cutoff_is_kept(tmp_path):
    boundary = _touch(tmp_path / "boundary.txt", timedelta(days=30))

    report = prune_log_files(tmp_path, timedelta(days=30), now=NOW)

    assert report.deleted == []
    assert boundary.exists()


def test_current_log_is_never_deleted(tmp_path):
    current = _touch(tmp_path / "current.txt", timedelta(days=90))

    report = prune_log_files(tmp_path, timedelta(days=30), now=NOW, keep=[current])

    assert current.exists()
    assert report.deleted == []


def test_directories_are_ignored(tmp_path):
    nested = tmp_path / "archive"
    nested.mkdir()
    ts = (NOW - timedelta(days=100)).timestamp()
    os.utime(nested, (ts, ts))

    report = prune_log_files(tmp_path, timedelta(days=30), now=NOW)

    assert nested.is_dir()
    assert report.deleted == []


def test_missing_directory_yields_empty_report(tmp_path):
    report = prune_log_files(tmp_path / "nope", timedelta(days=30), now=NOW)
    assert report.deleted == []
    assert report.failed == []


def test_deletion_failures_are_swallowed(monkeypatch, tmp_path):
    locked = _touch(tmp_path / "a_locked.txt", timedelta(days=40))
    old = _touch(tmp_path / "b_old.txt", timedelta(days=40))
    original_unlink = Path.unlink

    def fake_unlink(self, *args, **kwargs):
        if self.name == "a_locked.txt":
            raise PermissionError("in use")
        return original_unlink(self, *args, **kwargs)

    monkeypatch.setattr(Path, "unlink", fake_unlink)

    report = prune_log_files(tmp_path, timedelta(days=30), now=NOW)

    assert locked.exists()
    assert not old.exists()
    assert report.deleted == [old]
    assert [p for p, _ in report.failed] == [locked]
