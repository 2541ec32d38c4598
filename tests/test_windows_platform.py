from __future__ import annotations

import json
import subprocess
from unittest.mock import patch

import pytest

from mountwarden.credentials.models import ResolvedCredential
from mountwarden.platform import UnsupportedPlatformError, WindowsPlatform, get_platform
from mountwarden.platform.windows import SECRET_ENV, USER_ENV
from mountwarden.utils.errors import PlatformError

RUN = "mountwarden.platform.windows.subprocess.run"


def _completed(returncode=0, stdout="", stderr=""):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


def test_query_parses_logical_disk():
    payload = json.dumps(
        {"DeviceID": "Z:", "VolumeName": "Documents", "DriveType": 4, "ProviderName": "\\\\S\\Docs"}
    )
    with patch(RUN, return_value=_completed(stdout=payload)) as run:
        observation = WindowsPlatform().query_logical_disk("Z:")

    assert observation.device_id == "Z:"
    assert observation.is_network
    assert observation.provider_name == "\\\\S\\Docs"
    command = run.call_args.args[0]
    assert command[0] == "powershell"
    assert "DeviceID='Z:'" in command[-1]


def test_query_without_disk_returns_none():
    with patch(RUN, return_value=_completed(stdout="  \r\n")):
        assert WindowsPlatform().query_logical_disk("Q:") is None


def test_query_failure_raises():
    with patch(RUN, return_value=_completed(returncode=1, stderr="Access denied")):
        with pytest.raises(PlatformError, match="Access denied"):
            WindowsPlatform().query_logical_disk("Z:")


def test_query_garbage_raises():
    with patch(RUN, return_value=_completed(stdout="not json")):
        with pytest.raises(PlatformError, match="unexpected logical disk data"):
            WindowsPlatform().query_logical_disk("Z:")


def test_detach_uses_net_use():
    with patch(RUN, return_value=_completed()) as run:
        WindowsPlatform().detach("Z:")
    assert run.call_args.args[0] == ["net", "use", "Z:", "/delete", "/y"]


def test_detach_failure_carries_output():
    with patch(RUN, return_value=_completed(returncode=2, stderr="The network connection could not be found.")):
        with pytest.raises(PlatformError, match="could not be found"):
            WindowsPlatform().detach("Z:")


def test_attach_passes_secret_through_environment():
    credential = ResolvedCredential(user_name="Bob", secret="hunter2")
    with patch(RUN, return_value=_completed()) as run:
        WindowsPlatform().attach("Z:", "\\\\S\\Docs", credential)

    command = run.call_args.args[0]
    env = run.call_args.kwargs["env"]
    script = command[-1]
    assert "New-PSDrive" in script
    assert "Name = 'Z'" in script
    assert "Root = '\\\\S\\Docs'" in script
    assert "Persist = $true" in script
    assert "Scope = 'Global'" in script
    assert all("hunter2" not in part for part in command)
    assert env[USER_ENV] == "Bob"
    assert env[SECRET_ENV] == "hunter2"


def test_attach_without_credential_clears_credential_environment(monkeypatch):
    monkeypatch.setenv(SECRET_ENV, "leftover")
    with patch(RUN, return_value=_completed()) as run:
        WindowsPlatform().attach("Z:", "\\\\S\\Docs")

    env = run.call_args.kwargs["env"]
    assert USER_ENV not in env
    assert SECRET_ENV not in env


def test_attach_quotes_single_quotes():
    with patch(RUN, return_value=_completed()) as run:
        WindowsPlatform().attach("Z:", "\\\\S\\Bob's Docs")
    assert "Root = '\\\\S\\Bob''s Docs'" in run.call_args.args[0][-1]


def test_attach_timeout_becomes_platform_error():
    with patch(RUN, side_effect=subprocess.TimeoutExpired(cmd="powershell", timeout=5)):
        with pytest.raises(PlatformError, match="timed out"):
            WindowsPlatform(timeout=5).attach("Z:", "\\\\S\\Docs")


def test_get_platform_rejects_other_systems():
    with patch("mountwarden.platform.factory.platform.system", return_value="Linux"):
        with pytest.raises(UnsupportedPlatformError):
            get_platform()


def test_get_platform_on_windows():
    with patch("mountwarden.platform.factory.platform.system", return_value="Windows"):
        assert isinstance(get_platform(timeout=10), WindowsPlatform)
