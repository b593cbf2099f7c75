import argparse
import os
import sys
from dataclasses import dataclass

from .pathfilter import PatternError, validate_pattern

VERSION = "v0.0.3"
GRANULARITY_MS = 100
EXEC_FLAGS = ("-e", "--exec")

EPILOG = """\
example:
    watcher . --ignore .git node_modules .gitignore -t 1000 --exec build.sh

        watches over changes every second (-t 1000) on the current directory
        (.), except for the .git and node_modules directories and the
        .gitignore file. If any changes are detected, build.sh is run and its
        output is displayed on the standard output.

    watcher src --tick-speed 3000 -e "pytest -x"

        watches for changes every three seconds in the src directory and runs
        pytest -x whenever a change is detected.

notes:
    ignore entries match as a path suffix or as a glob against the full
    path, where * and ? never match a directory separator.

    only file modification times are compared, so deleting or renaming a
    file does not trigger the command.
"""


class ConfigurationError(Exception):
    pass


@dataclass(frozen=True)
class WatchConfiguration:
    watch_roots: tuple
    command: tuple
    ignore_patterns: tuple = ()
    poll_interval: float = GRANULARITY_MS / 1000

    def __post_init__(self):
        if not self.watch_roots:
            raise ConfigurationError("no file to watch over has been given")
        if not self.command:
            raise ConfigurationError(
                "no execution flag has been found or there is nothing after it"
            )
        if self.poll_interval <= 0:
            raise ConfigurationError("tick speed must be positive")


class ArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        raise ConfigurationError(message)


class TickSpeedAction(argparse.Action):
    def __call__(self, parser, namespace, values, option_string=None):
        if len(values) > 1:
            parser.error("only one argument should be passed after a tick speed flag")
        try:
            milliseconds = int(values[0])
        except ValueError:
            parser.error("given milliseconds failed to be parsed as a number")
        if milliseconds <= 0:
            parser.error("tick speed must be positive")
        if getattr(namespace, self.dest) is not None:
            parser.error("the tick speed has already been set")
        setattr(namespace, self.dest, milliseconds)


def round_tick_speed(milliseconds):
    steps = (milliseconds + GRANULARITY_MS // 2) // GRANULARITY_MS
    return max(steps, 1) * GRANULARITY_MS / 1000


def build_parser():
    parser = ArgumentParser(
        prog="watcher",
        allow_abbrev=False,
        usage="%(prog)s { <filepath> } { <option> } ( --exec | -e ) <command> [ <args> ]",
        description="watches for changes on the given files and directories "
        "(and files inside the given directories) over a period of time and "
        "runs the given command whenever any changes are detected.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v", "--version", action="version",
        version=f"%(prog)s {VERSION} for {sys.platform}",
    )
    parser.add_argument(
        dest="watch", nargs="*", metavar="filepath",
        help="path to a file or directory",
    )
    parser.add_argument(
        "-w", "--watch", dest="more_watch", nargs="+", action="extend",
        default=[], metavar="filepath",
        help="adds more filepaths to watch",
    )
    parser.add_argument(
        "-i", "--ignore", dest="ignore", nargs="*", action="extend",
        default=[], metavar="filepath",
        help="skips watching the filepaths given after this flag",
    )
    parser.add_argument(
        "-t", "--tick-speed", dest="tick_speed", nargs="+",
        action=TickSpeedAction, metavar="milliseconds",
        help="defines the wait time in between watches",
    )
    parser.add_argument(
        "-e", "--exec", dest="command", metavar="command",
        help="command to be executed when changes are detected, "
        "everything after it is passed verbatim",
    )
    return parser


def split_command(argv):
    for i, arg in enumerate(argv):
        if arg in EXEC_FLAGS:
            return argv[:i], argv[i + 1:]
    return argv, []


def normalize_ignore(patterns):
    normalized = []
    for pattern in patterns:
        pattern = os.path.normpath(pattern)
        try:
            validate_pattern(pattern)
        except PatternError as e:
            raise ConfigurationError(str(e)) from e
        normalized.append(pattern)
    return tuple(normalized)


def parse_arguments(argv):
    head, command = split_command(list(argv))
    args = build_parser().parse_args(head)
    if not command:
        raise ConfigurationError(
            "no execution flag has been found or there is nothing after it"
        )
    watch = args.watch + args.more_watch
    interval = GRANULARITY_MS / 1000
    if args.tick_speed is not None:
        interval = round_tick_speed(args.tick_speed)
    return WatchConfiguration(
        watch_roots=tuple(os.path.abspath(path) for path in watch),
        command=tuple(command),
        ignore_patterns=normalize_ignore(args.ignore),
        poll_interval=interval,
    )
