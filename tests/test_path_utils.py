import pytest

from path_utils import get_base_dir, get_log_dir, resolve_path


def test_relative_paths_hang_off_home(tmp_path, monkeypatch):
    monkeypatch.setenv("PRICECHECK_HOME", str(tmp_path))
    assert get_base_dir() == tmp_path.resolve()
    assert resolve_path("config.json") == tmp_path.resolve() / "config.json"
    assert resolve_path("/etc/kiosk.json").as_posix() == "/etc/kiosk.json"


def test_resolve_none_rejected():
    with pytest.raises(ValueError):
        resolve_path(None)


def test_log_dir_created_under_home(tmp_path, monkeypatch):
    monkeypatch.setenv("PRICECHECK_HOME", str(tmp_path))
    monkeypatch.delenv("PRICECHECK_LOG_DIR", raising=False)
    log_dir = get_log_dir()
    assert log_dir == tmp_path.resolve() / "logs"
    assert log_dir.is_dir()


def test_log_dir_override(tmp_path, monkeypatch):
    monkeypatch.setenv("PRICECHECK_LOG_DIR", str(tmp_path / "var" / "log"))
    assert get_log_dir() == tmp_path / "var" / "log"


def test_log_dir_blocked_by_file(tmp_path, monkeypatch):
    blocker = tmp_path / "logs"
    blocker.write_text("not a dir")
    monkeypatch.setenv("PRICECHECK_LOG_DIR", str(blocker))
    with pytest.raises(NotADirectoryError):
        get_log_dir()
