import logging
import os
import sys

from .config import VERSION, ConfigurationError, build_parser, parse_arguments
from .console import ConsoleError, virtual_terminal
from .loop import SignalListener, Watcher

__version__ = VERSION


def is_verbose():
    return os.environ.get("WATCHER_VERBOSE", "").lower() in ("1", "true", "yes")


def main(argv=None):
    logging.basicConfig(
        level=logging.DEBUG if is_verbose() else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )
    argv = sys.argv[1:] if argv is None else argv
    try:
        with virtual_terminal(sys.stdout):
            with SignalListener() as listener:
                try:
                    config = parse_arguments(argv)
                except ConfigurationError as e:
                    print(build_parser().format_usage(), end="")
                    print(e)
                    return 2
                return Watcher(config, listener).run()
    except ConsoleError as e:
        print("failed to enable virtual terminal:", e)
        return 1
