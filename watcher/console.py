import ctypes
import logging
import sys
from contextlib import contextmanager

log = logging.getLogger(__name__)

ENABLE_VIRTUAL_TERMINAL_PROCESSING = 0x0004


class ConsoleError(Exception):
    def __init__(self, msg, winerror=None):
        super().__init__(msg)
        self.winerror = winerror


class Kernel32:
    """Console mode calls, only available on Windows."""

    def __init__(self):
        from ctypes import wintypes

        self._cdll = ctypes.WinDLL("kernel32", use_last_error=True)
        self.GetConsoleMode = self._cdll.GetConsoleMode
        self.GetConsoleMode.argtypes = (wintypes.HANDLE, ctypes.POINTER(wintypes.DWORD))
        self.GetConsoleMode.restype = wintypes.BOOL
        self.GetConsoleMode.errcheck = self.check_result("GetConsoleMode")
        self.SetConsoleMode = self._cdll.SetConsoleMode
        self.SetConsoleMode.argtypes = (wintypes.HANDLE, wintypes.DWORD)
        self.SetConsoleMode.restype = wintypes.BOOL
        self.SetConsoleMode.errcheck = self.check_result("SetConsoleMode")

    @staticmethod
    def check_result(name):
        def check_result(result, func, args):
            if not result:
                code = ctypes.get_last_error()
                raise ConsoleError(
                    f"{name} failed with: {ctypes.FormatError(code)}",
                    winerror=code,
                )
            return args

        return check_result

    def handle(self, stream):
        import msvcrt

        return msvcrt.get_osfhandle(stream.fileno())

    def get_mode(self, handle):
        mode = ctypes.c_ulong()
        self.GetConsoleMode(handle, ctypes.byref(mode))
        return mode.value

    def set_mode(self, handle, mode):
        self.SetConsoleMode(handle, mode)


def enable_virtual_terminal(kernel32, handle):
    mode = kernel32.get_mode(handle)
    kernel32.set_mode(handle, mode | ENABLE_VIRTUAL_TERMINAL_PROCESSING)


def disable_virtual_terminal(kernel32, handle):
    mode = kernel32.get_mode(handle)
    kernel32.set_mode(handle, mode & ~ENABLE_VIRTUAL_TERMINAL_PROCESSING)


@contextmanager
def virtual_terminal(stream=None, platform=None, kernel32=None):
    """Make the console interpret ANSI escape sequences while in use.

    Only Windows consoles need this; elsewhere it does nothing.
    """
    if (platform or sys.platform) != "win32":
        yield
        return
    kernel32 = kernel32 or Kernel32()
    handle = kernel32.handle(stream or sys.stdout)
    enable_virtual_terminal(kernel32, handle)
    try:
        yield
    finally:
        try:
            disable_virtual_terminal(kernel32, handle)
        except ConsoleError as e:
            log.debug("could not restore console mode: %s", e)
