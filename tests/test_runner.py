import sys

import pytest

from watcher import runner
from watcher.runner import Completed, Fatal, UnsupportedPlatformError, shell_command

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="runs /bin/sh")


def test_posix_shell_joins_command():
    assert shell_command(["go", "test", "./..."], platform="linux") == [
        "/bin/sh", "-c", "go test ./...",
    ]
    assert shell_command(["make"], platform="darwin") == ["/bin/sh", "-c", "make"]


def test_windows_shell_keeps_arguments():
    assert shell_command(["build.bat", "release"], platform="win32") == [
        "cmd", "/c", "build.bat", "release",
    ]


def test_unsupported_platform():
    with pytest.raises(UnsupportedPlatformError, match="unsupported OS: plan9"):
        shell_command(["true"], platform="plan9")


def test_unsupported_platform_is_fatal(monkeypatch):
    monkeypatch.setattr(runner.sys, "platform", "plan9")
    assert runner.run(["true"]) == Fatal("unsupported OS: plan9")


@posix_only
def test_success():
    assert runner.run(["true"]) == Completed(0)


@posix_only
def test_non_zero_exit_is_not_fatal():
    assert runner.run(["exit", "3"]) == Completed(3)


@posix_only
def test_output_is_not_captured(capfd):
    runner.run(["echo", "hello"])
    assert capfd.readouterr().out == "hello\n"


def test_start_failure_is_fatal(monkeypatch, tmp_path):
    missing = str(tmp_path / "no-such-shell")
    monkeypatch.setattr(runner, "shell_command", lambda command: [missing])
    outcome = runner.run(["true"])
    assert isinstance(outcome, Fatal)
    assert outcome.reason.startswith(f"failed to start {missing}")
