"""Shared plumbing for the monitoring plugins: states, errors and entry points."""

from __future__ import annotations

import os
import re
import sys
from enum import IntEnum
from typing import Callable, Optional, Sequence

DELAY_DEFAULT = 1
COUNT_DEFAULT = 2
DELAY_MAX = 60
COUNT_MAX = 100


class Status(IntEnum):
    """Nagios plugin return codes."""

    OK = 0
    WARNING = 1
    CRITICAL = 2
    UNKNOWN = 3
    DEPENDENT = 4


def state_text(status) -> str:
    """Return the Nagios name of a status code."""
    try:
        return Status(status).name
    except ValueError:
        return Status.UNKNOWN.name


class PluginError(Exception):
    """A failure that ends the plugin with the given status."""

    def __init__(self, message: str, status: Status = Status.UNKNOWN):
        super().__init__(message)
        self.message = message
        self.status = Status(status)

    def __str__(self) -> str:
        return self.message


class UsageError(PluginError):
    """The command line was not valid."""

    def __init__(self, message: str = "invalid usage"):
        super().__init__(message, Status.UNKNOWN)


def short_program_name(argv0: str) -> str:
    """Return the program name without its directory and 'check_' prefix."""
    name = os.path.basename(argv0)
    if name.startswith("lt-"):
        name = name[3:]
    if name.startswith("check_") and len(name) > len("check_"):
        name = name[len("check_"):]
    return name


_INTEGER = re.compile(r"\s*[+-]?\d+")


def parse_delay(text: str) -> int:
    """Parse the delay argument, which must lie between 1 and DELAY_MAX."""
    if not _INTEGER.fullmatch(text):
        raise PluginError(f"failed to parse argument: '{text}'")
    delay = int(text)
    if delay < 1:
        raise PluginError("delay must be positive integer")
    if delay > DELAY_MAX:
        raise PluginError(f"too large delay value (greater than {DELAY_MAX})")
    return delay


def _program_name() -> str:
    return os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "plugin"


def run_plugin(body: Callable[[list], Optional[int]],
               argv: Optional[Sequence[str]] = None) -> int:
    """Run a plugin body and turn its outcome into a Nagios exit code."""
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        status = body(args)
    except PluginError as err:
        print(f"{_program_name()}: {err.message}", file=sys.stderr)
        return int(err.status)
    except OSError as err:
        print(f"{_program_name()}: {err}", file=sys.stderr)
        return int(Status.UNKNOWN)
    except SystemExit as exc:
        code = exc.code
        if code is None:
            return int(Status.OK)
        if isinstance(code, int):
            # argparse reports bad usage with exit code 2
            return int(Status.UNKNOWN) if code == 2 else code
        print(code, file=sys.stderr)
        return int(Status.UNKNOWN)
    return int(Status.OK) if status is None else int(status)