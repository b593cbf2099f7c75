import logging
import select
import signal
import socket
import sys
import time
from datetime import datetime

from . import runner
from .runner import Fatal
from .scanner import ScanError, scan

log = logging.getLogger(__name__)

CLEAR = "\033[2J\033[1;1H"
DIM = "\033[90m"
YELLOW = "\033[33m"
RESET = "\033[m"


def timestamp():
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


class SignalListener:
    """Remember the first termination signal received while active.

    Delivery also writes to the interpreter's wakeup fd, so wait() returns
    as soon as a signal arrives instead of sleeping out the interval.
    """

    def __init__(self, *signums):
        self.signums = signums or (signal.SIGINT, signal.SIGTERM)
        self.received = None
        self._previous = {}
        self._previous_fd = -1
        self._reader = self._writer = None

    def _handle(self, signum, frame):
        log.debug("received signal %d", signum)
        if self.received is None:
            self.received = signum

    def __enter__(self):
        self._reader, self._writer = socket.socketpair()
        self._reader.setblocking(False)
        self._writer.setblocking(False)
        self._previous_fd = signal.set_wakeup_fd(self._writer.fileno())
        for signum in self.signums:
            self._previous[signum] = signal.signal(signum, self._handle)
        return self

    def __exit__(self, *exc_info):
        while self._previous:
            signum, handler = self._previous.popitem()
            signal.signal(signum, handler)
        signal.set_wakeup_fd(self._previous_fd)
        self._reader.close()
        self._writer.close()
        self._reader = self._writer = None
        return False

    def wait(self, timeout):
        """Block up to timeout seconds, True if a signal cut the wait short."""
        readable, _, _ = select.select([self._reader], [], [], timeout)
        if not readable:
            return False
        try:
            while self._reader.recv(512):
                pass
        except BlockingIOError:
            pass
        return True


class Watcher:
    def __init__(self, config, listener, out=None, clock=time.monotonic):
        self.config = config
        self.listener = listener
        self.out = out or sys.stdout
        self.clock = clock
        self.baseline = 0

    def write(self, text):
        self.out.write(text)
        self.out.flush()

    def announce(self, path):
        if path:
            message = f"{path} has changed"
        else:
            message = "First execution"
        self.write(f"{CLEAR}[{DIM}{timestamp()}{RESET}] {message}{RESET}\n\n")

    def execute(self, path=""):
        """Announce and run the command, returning False if watching must stop."""
        self.announce(path)
        outcome = runner.run(self.config.command)
        if isinstance(outcome, Fatal):
            self.write(f"{outcome.reason}\n")
            return False
        if outcome.returncode != 0:
            self.write(f"\nexited with code {YELLOW}{outcome.returncode}{RESET}\n")
        self.write("\n")
        return True

    def poll(self):
        """Scan once and run the command if something newer showed up.

        Returns None when nothing changed, otherwise what execute() returned.
        """
        result = scan(self.config)
        if result.latest_mtime <= self.baseline:
            self.write(f"[{DIM}{timestamp()}{RESET}]\r")
            return None
        self.baseline = result.latest_mtime
        return self.execute(result.latest_path)

    def ticks(self):
        interval = self.config.poll_interval
        deadline = self.clock() + interval
        while self.listener.received is None:
            remaining = deadline - self.clock()
            if remaining > 0 and self.listener.wait(remaining):
                continue
            yield
            now = self.clock()
            deadline += interval
            if deadline < now:
                log.debug("dropping ticks missed while the command ran")
                deadline = now

    def run(self):
        """Watch until a signal arrives or something fatal happens.

        Returns the process exit status.
        """
        try:
            self.baseline = scan(self.config).latest_mtime
        except ScanError as e:
            self.write(f"{e}\n")
            return 1
        if not self.execute():
            return 1
        for _ in self.ticks():
            try:
                proceed = self.poll()
            except ScanError as e:
                self.write(f"{e}\n")
                return 1
            if proceed is False:
                return 1
        return 0
