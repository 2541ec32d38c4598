from __future__ import annotations

import logging
from pathlib import Path

import pytest
from click.testing import CliRunner

from mountwarden.cli import main as cli_main
from mountwarden.platform import UnsupportedPlatformError
from mountwarden.utils.logging import log_file_path


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    saved, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in saved:
            handler.close()
    root.handlers[:] = saved
    root.setLevel(level)


@pytest.fixture
def use_platform(monkeypatch, platform):
    monkeypatch.setattr(cli_main, "get_platform", lambda: platform)
    return platform


def _config(tmp_path: Path, mounts: str) -> Path:
    log_dir = (tmp_path / "logs").as_posix()
    path = tmp_path / "mountwarden.yaml"
    path.write_text(f"logging:\n  directory: '{log_dir}'\nmounts:\n{mounts}", encoding="utf-8")
    return path


TWO_MOUNTS = r"""  - {drive_letter: "Z:", remote_path: '\\S\Docs'}
  - drive_letter: "Y:"
    remote_path: '\\S\Media'
    credential: {user_name: Bob, secret: "ENV:MYSECRET"}
"""


def _invoke(*args):
    return CliRunner().invoke(cli_main.cli, list(args), obj={})


def test_run_mounts_and_logs(tmp_path, use_platform, monkeypatch):
    monkeypatch.setenv("MYSECRET", "hunter2")
    use_platform.share("\\\\S\\Docs", "\\\\S\\Media")
    config = _config(tmp_path, TWO_MOUNTS)

    result = _invoke("run", "--config", str(config))

    assert result.exit_code == 0, result.output
    attaches = [call[1:3] for call in use_platform.calls if call[0] == "attach"]
    assert attaches == [("Z:", "\\\\S\\Docs"), ("Y:", "\\\\S\\Media")]
    for handler in logging.getLogger().handlers:
        handler.flush()
    log_text = log_file_path(tmp_path / "logs").read_text(encoding="utf-8")
    assert "Reconciliation run" in log_text
    assert "Mounted Y:" in log_text
    assert "hunter2" not in log_text
    assert "hunter2" not in result.output


def test_run_with_nothing_to_do_writes_no_log(tmp_path, use_platform):
    use_platform.share("\\\\S\\Docs").map("Z:", "\\\\S\\Docs")
    config = _config(tmp_path, "  - {drive_letter: \"Z:\", remote_path: '\\\\S\\Docs'}\n")

    result = _invoke("run", "--config", str(config), "--quiet")

    assert result.exit_code == 0, result.output
    assert use_platform.mutations() == []
    assert list((tmp_path / "logs").iterdir()) == []


def test_run_exit_code_on_failure(tmp_path, use_platform, monkeypatch):
    monkeypatch.delenv("MYSECRET", raising=False)
    use_platform.share("\\\\S\\Docs", "\\\\S\\Media")
    config = _config(tmp_path, TWO_MOUNTS)

    result = _invoke("run", "--config", str(config))

    assert result.exit_code == cli_main.EXIT_MOUNT_FAILED
    assert [c[1] for c in use_platform.calls if c[0] == "attach"] == ["Z:"]


def test_run_rejects_duplicate_letters_before_touching_mounts(tmp_path, use_platform):
    mounts = "  - {drive_letter: \"Z:\", remote_path: '\\\\S\\Docs'}\n" * 2
    config = _config(tmp_path, mounts)

    result = _invoke("run", "--config", str(config))

    assert result.exit_code == cli_main.EXIT_CONFIG_ERROR
    assert "already used" in result.output
    assert use_platform.calls == []


def test_run_missing_config(tmp_path):
    result = _invoke("run", "--config", str(tmp_path / "absent.yaml"))
    assert result.exit_code == cli_main.EXIT_CONFIG_ERROR
    assert "not found" in result.output


def test_run_unsupported_platform(tmp_path, monkeypatch):
    def unsupported():
        raise UnsupportedPlatformError("Drive letter mappings are not supported on platform: linux")

    monkeypatch.setattr(cli_main, "get_platform", unsupported)
    config = _config(tmp_path, TWO_MOUNTS)

    result = _invoke("run", "--config", str(config))

    assert result.exit_code == cli_main.EXIT_CONFIG_ERROR
    assert "not supported" in result.output


def test_config_path_from_environment(tmp_path, use_platform, monkeypatch):
    use_platform.share("\\\\S\\Docs").map("Z:", "\\\\S\\Docs")
    config = _config(tmp_path, "  - {drive_letter: \"Z:\", remote_path: '\\\\S\\Docs'}\n")
    monkeypatch.setenv("MOUNTWARDEN_CONFIG", str(config))

    result = _invoke("run", "--quiet")

    assert result.exit_code == 0, result.output


def test_status_is_read_only(tmp_path, use_platform):
    use_platform.share("\\\\S\\Docs", "\\\\S\\Media").map("Z:", "\\\\S\\Docs")
    config = _config(tmp_path, TWO_MOUNTS)

    result = _invoke("status", "--config", str(config))

    assert result.exit_code == cli_main.EXIT_MOUNT_FAILED
    assert use_platform.mutations() == []
    assert "mounted" in result.output


def test_status_all_mounted(tmp_path, use_platform):
    use_platform.share("\\\\S\\Docs").map("Z:", "\\\\S\\Docs")
    config = _config(tmp_path, "  - {drive_letter: \"Z:\", remote_path: '\\\\S\\Docs'}\n")

    result = _invoke("status", "--config", str(config))

    assert result.exit_code == 0, result.output


def test_validate(tmp_path):
    mounts = TWO_MOUNTS + "  - {drive_letter: \"X:\", remote_path: '\\\\S\\Scans', credential: {user_name: scan, secret: hunter2}}\n"
    config = _config(tmp_path, mounts)

    result = _invoke("validate", "--config", str(config))

    assert result.exit_code == 0, result.output
    assert "Configuration is valid" in result.output
    assert "hunter2" not in result.output


def test_validate_reports_errors(tmp_path):
    config = _config(tmp_path, "  - {drive_letter: \"z\", remote_path: '\\\\S\\Docs'}\n")

    result = _invoke("validate", "--config", str(config))

    assert result.exit_code == cli_main.EXIT_CONFIG_ERROR
    assert "drive_letter" in result.output


@pytest.mark.parametrize(
    "text",
    [
        "logging:\nmounts:\n  - {drive_letter: \"Z:\", remote_path: '\\\\S\\Docs'}\n",
        "mounts: [{1: x}]\n",
    ],
)
def test_validate_exit_code_for_malformed_sections(tmp_path, text):
    config = tmp_path / "mountwarden.yaml"
    config.write_text(text, encoding="utf-8")

    result = _invoke("validate", "--config", str(config))

    assert result.exit_code == cli_main.EXIT_CONFIG_ERROR
    assert "Traceback" not in result.output


def test_create_platform_logs_backend_name(use_platform, caplog):
    with caplog.at_level(logging.DEBUG, logger="mountwarden.cli.main"):
        assert cli_main.create_platform() is use_platform

    assert "Using Fake drive mapping backend" in caplog.text
