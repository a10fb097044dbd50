from __future__ import annotations

from pathlib import Path

from tracker_sync.logging_conf import configure_logging, default_log_dir, tail_log


def test_configure_logging_creates_log_files(tmp_path: Path) -> None:
    logger = configure_logging(log_dir=tmp_path)
    assert logger is not None
    assert (tmp_path / "tracker_sync.log").exists()
    assert (tmp_path / "error.log").exists()


def test_default_log_dir_follows_home_env(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("TRACKER_SYNC_HOME", str(tmp_path))
    assert default_log_dir() == tmp_path.resolve() / "logs"


def test_tail_log(tmp_path: Path) -> None:
    path = tmp_path / "sample.log"
    assert tail_log(path) == []
    path.write_text("".join(f"line {i}\n" for i in range(10)), encoding="utf-8")
    assert tail_log(path, 3) == ["line 7\n", "line 8\n", "line 9\n"]
