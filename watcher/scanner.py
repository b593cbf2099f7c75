import logging
import os
import stat
from collections import namedtuple

from .pathfilter import excluded

log = logging.getLogger(__name__)


ScanResult = namedtuple("ScanResult", ["latest_mtime", "latest_path"])
ScanResult.__new__.__defaults__ = (0, "")


class ScanError(Exception):
    def __init__(self, path, error):
        super().__init__(f"{path}: {error.strerror or error}")
        self.path = path
        self.error = error


def walk(root, ignore):
    """Yield (path, stat) for every entry under root, directories first.

    Children are visited in name order. Excluded directories are pruned
    without being listed.
    """
    if excluded(root, ignore):
        return
    try:
        info = os.stat(root)
    except OSError as e:
        raise ScanError(root, e) from e
    yield root, info
    if not os.path.isdir(root):
        return
    yield from _walk_children(root, ignore)


def _walk_children(directory, ignore):
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda entry: entry.name)
    except OSError as e:
        raise ScanError(directory, e) from e
    for entry in entries:
        if excluded(entry.path, ignore):
            continue
        try:
            info = entry.stat()
            descend = entry.is_dir(follow_symlinks=False)
        except OSError as e:
            raise ScanError(entry.path, e) from e
        yield entry.path, info
        if descend:
            yield from _walk_children(entry.path, ignore)


def scan(config):
    latest = ScanResult()
    files = 0
    for root in config.watch_roots:
        for path, info in walk(root, config.ignore_patterns):
            if stat.S_ISDIR(info.st_mode):
                continue
            files += 1
            if info.st_mtime_ns > latest.latest_mtime:
                latest = ScanResult(info.st_mtime_ns, path)
    log.debug("scanned %d files, latest is %r", files, latest.latest_path)
    return latest
