import os

import pytest

from watcher.config import WatchConfiguration


@pytest.fixture
def make_config(tmp_path):
    def make_config(roots=None, ignore=(), command=("true",), interval=0.1):
        return WatchConfiguration(
            watch_roots=tuple(str(root) for root in (roots or [tmp_path])),
            command=tuple(command),
            ignore_patterns=tuple(ignore),
            poll_interval=interval,
        )

    return make_config


@pytest.fixture
def touch():
    """Create a file with an exact modification time in seconds."""

    def touch(path, mtime):
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("")
        os.utime(path, ns=(mtime * 10**9, mtime * 10**9))
        return path

    return touch
