"""Check of how long the system has been running."""

from __future__ import annotations

import argparse
import os
import time
from pathlib import Path
from typing import Optional, Sequence

from .plugin import PluginError, Status, run_plugin, state_text
from .thresholds import get_status, set_thresholds

PROGRAM_NAME = "check_uptime"
_PROGRAM_SHORT = "uptime"
_UPTIME_ENV = "NPL_TESTING_PATH_PROC_UPTIME"
_SECONDS_PER_DAY = 60 * 60 * 24


def format_uptime(seconds: float) -> str:
    """Return the uptime as 'N day(s) H hour(s) M min', omitting zero days and hours."""
    total = int(seconds)
    days = total // _SECONDS_PER_DAY
    text = f"{days} day{'s' if days != 1 else ''} " if days else ""
    minutes = total // 60
    hours = (minutes // 60) % 24
    minutes %= 60
    if hours:
        text += f"{hours} hour{'s' if hours != 1 else ''} {minutes} min"
    else:
        text += f"{minutes} min"
    return text


def _uptime_path() -> str:
    return os.environ.get(_UPTIME_ENV) or "/proc/uptime"


def read_uptime(path: Optional[str] = None) -> float:
    """Return the seconds elapsed since boot, read from the proc uptime file."""
    source = Path(path if path is not None else _uptime_path())
    try:
        fields = source.read_text().split()
        return float(fields[0])
    except OSError as err:
        raise PluginError(f"cannot get the system uptime: {err.strerror}") from err
    except (IndexError, ValueError) as err:
        raise PluginError("cannot get the system uptime") from err


def _uptime_monotonic() -> float:
    return float(int(time.monotonic()))


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROGRAM_NAME,
        description="This plugin checks how long the system has been running.",
        epilog="See the Nagios Developer Guidelines for the range format.",
    )
    parser.add_argument("-m", "--clock-monotonic", dest="monotonic",
                        action="store_true",
                        help="use the monotonic clock for retrieving the time")
    parser.add_argument("-c", "--critical", metavar="MINUTES",
                        help="critical threshold")
    parser.add_argument("-w", "--warning", metavar="MINUTES",
                        help="warning threshold")
    parser.add_argument("-V", "--version", action="version",
                        version="%(prog)s (linuxprobes)")
    return parser


def _run(args: list) -> Status:
    opts = _parser().parse_args(args)
    thresholds = set_thresholds(opts.warning, opts.critical)

    seconds = _uptime_monotonic() if opts.monotonic else read_uptime()
    minutes = int(seconds) // 60
    status = get_status(minutes, thresholds)

    message = f"{_PROGRAM_SHORT} {state_text(status)}: {format_uptime(seconds)}"
    perfdata = (f"uptime={minutes};{opts.warning or ''};"
                f"{opts.critical or ''};0;")
    print(f"{message} | {perfdata}")
    return status


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the uptime check and return its exit code."""
    return run_plugin(_run, argv)