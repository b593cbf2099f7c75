import logging
import subprocess
import sys
from collections import namedtuple

log = logging.getLogger(__name__)


Completed = namedtuple("Completed", ["returncode"])
Fatal = namedtuple("Fatal", ["reason"])


class UnsupportedPlatformError(Exception):
    pass


def shell_command(command, platform=None):
    platform = platform or sys.platform
    if platform == "win32":
        return ["cmd", "/c", *command]
    if platform == "darwin" or platform.startswith("linux"):
        return ["/bin/sh", "-c", " ".join(command)]
    raise UnsupportedPlatformError(f"unsupported OS: {platform}")


def run(command):
    """Run command attached to our own stdin, stdout and stderr.

    Blocks until the child exits. Anything that keeps the child from starting
    is reported as Fatal, a non-zero exit status is not.
    """
    try:
        argv = shell_command(command)
    except UnsupportedPlatformError as e:
        return Fatal(str(e))
    log.debug("spawning %r", argv)
    try:
        process = subprocess.Popen(argv)
    except OSError as e:
        return Fatal(f"failed to start {argv[0]}: {e.strerror or e}")
    return Completed(process.wait())
