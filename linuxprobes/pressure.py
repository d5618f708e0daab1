"""Check of the Linux Pressure Stall Information (PSI) data."""

from __future__ import annotations

import argparse
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Optional, Sequence, Tuple

from .plugin import (
    DELAY_DEFAULT,
    PluginError,
    Status,
    UsageError,
    parse_delay,
    run_plugin,
    state_text,
)
from .thresholds import get_status, set_thresholds

PROGRAM_NAME = "check_pressure"
_PROGRAM_SHORT = "pressure"

PATH_PROC_PRESSURE = "/proc/pressure"


class PsiMode(Enum):
    """The resource whose pressure is checked."""

    NONE = 0
    CPU = 1
    IO = 2
    MEMORY = 3


PSI_PATHS = {
    PsiMode.CPU: f"{PATH_PROC_PRESSURE}/cpu",
    PsiMode.IO: f"{PATH_PROC_PRESSURE}/io",
    PsiMode.MEMORY: f"{PATH_PROC_PRESSURE}/memory",
}


@dataclass(frozen=True)
class PsiLine:
    """One 'some' or 'full' line of a pressure file.

    The averages are percentages of time over 10, 60 and 300 seconds;
    total is the cumulated stall time in microseconds.
    """

    avg10: float = 0.0
    avg60: float = 0.0
    avg300: float = 0.0
    total: int = 0


def parse_psi(text: str) -> Dict[str, PsiLine]:
    """Parse a pressure file into a mapping of 'some'/'full' to their lines."""
    lines: Dict[str, PsiLine] = {}
    for raw in text.splitlines():
        kind, _, rest = raw.strip().partition(" ")
        if kind not in ("some", "full"):
            continue
        fields = dict(item.split("=", 1) for item in rest.split() if "=" in item)
        try:
            lines[kind] = PsiLine(
                avg10=float(fields["avg10"]),
                avg60=float(fields["avg60"]),
                avg300=float(fields["avg300"]),
                total=int(fields["total"]),
            )
        except (KeyError, ValueError) as err:
            raise PluginError(f"malformed pressure data: '{raw.strip()}'") from err
    return lines


def _load(path) -> Dict[str, PsiLine]:
    try:
        text = Path(path).read_text()
    except OSError as err:
        raise PluginError(f"cannot open {path}: {err.strerror}") from err
    lines = parse_psi(text)
    if "some" not in lines:
        raise PluginError(f"no pressure data found in {path}")
    return lines


def read_psi(path, delay: int = DELAY_DEFAULT,
             sleep: Optional[Callable[[float], None]] = None,
             ) -> Tuple[Dict[str, PsiLine], Dict[str, int]]:
    """Read a pressure file twice, delay seconds apart.

    Return the latest lines and, for each kind, the stall time in
    microseconds per second between the two reads.
    """
    if delay < 1:
        raise PluginError("delay must be positive integer")
    first = _load(path)
    (sleep or time.sleep)(delay)
    second = _load(path)
    starvation = {
        kind: (line.total - first[kind].total) // delay
        for kind, line in second.items()
        if kind in first
    }
    return second, starvation


def _format_cpu(status: Status, line: PsiLine, starvation: int) -> str:
    message = (f"{_PROGRAM_SHORT} (CPU starvation) {state_text(status)}: "
               f"{starvation} microsecs/s")
    perfdata = (f"cpu_avg10={line.avg10:2.2f}% cpu_avg60={line.avg60:2.2f}% "
                f"cpu_avg300={line.avg300:2.2f}% cpu_starvation/s={starvation}")
    return f"{message} | {perfdata}"


def _format_twolines(mode: PsiMode, status: Status, lines: Dict[str, PsiLine],
                     starvation: Dict[str, int]) -> str:
    prefix = "io" if mode is PsiMode.IO else "mem"
    label = "IO" if mode is PsiMode.IO else "Memory"
    some_stall = starvation.get("some", 0)
    full_stall = starvation.get("full", 0)
    message = (f"{_PROGRAM_SHORT} ({label} starvation) {state_text(status)}: "
               f"some:{some_stall} full:{full_stall} microsecs/s")
    perfdata = ""
    for kind, stall in (("some", some_stall), ("full", full_stall)):
        line = lines.get(kind, PsiLine())
        perfdata += (f"{prefix}_{kind}_avg10={line.avg10:2.2f}% "
                     f"{prefix}_{kind}_avg60={line.avg60:2.2f}% "
                     f"{prefix}_{kind}_avg300={line.avg300:2.2f}% "
                     f"{prefix}_{kind}_starvation/s={stall} ")
    return f"{message} | {perfdata}"


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROGRAM_NAME,
        description="This plugin checks Linux Pressure Stall Information "
                    "(PSI) data. It requires at least a kernel 4.20.",
    )
    parser.add_argument("-C", "--cpu", dest="mode", action="store_const",
                        const=PsiMode.CPU,
                        help="return the cpu pressure metrics")
    parser.add_argument("-i", "--io", dest="mode", action="store_const",
                        const=PsiMode.IO,
                        help="return the io (block layer/filesystems) "
                             "pressure metrics")
    parser.add_argument("-m", "--memory", dest="mode", action="store_const",
                        const=PsiMode.MEMORY,
                        help="return the memory pressure metrics")
    parser.add_argument("-f", "--full", action="store_true",
                        help="use the data labeled 'full' for the thresholds "
                             "(io and memory only)")
    parser.add_argument("-c", "--critical", metavar="COUNTER",
                        help="critical threshold (in microseconds/s)")
    parser.add_argument("-w", "--warning", metavar="COUNTER",
                        help="warning threshold (in microseconds/s)")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help=argparse.SUPPRESS)
    parser.add_argument("-V", "--version", action="version",
                        version="%(prog)s (linuxprobes)")
    parser.add_argument("delay", nargs="?",
                        help="delay in seconds between two reads "
                             f"(default: {DELAY_DEFAULT}sec)")
    parser.set_defaults(mode=PsiMode.NONE)
    return parser


def _run(args: list) -> Status:
    opts = _parser().parse_args(args)
    mode = opts.mode
    if mode is PsiMode.NONE:
        raise UsageError("one of --cpu, --io or --memory is required")
    if mode is PsiMode.CPU and opts.full:
        raise UsageError("--full cannot be used with --cpu")

    thresholds = set_thresholds(opts.warning, opts.critical)
    delay = DELAY_DEFAULT if opts.delay is None else parse_delay(opts.delay)

    lines, starvation = read_psi(PSI_PATHS[mode], delay)
    if mode is PsiMode.CPU:
        stall = starvation.get("some", 0)
        status = get_status(stall, thresholds)
        print(_format_cpu(status, lines["some"], stall))
    else:
        kind = "full" if opts.full else "some"
        status = get_status(starvation.get(kind, 0), thresholds)
        print(_format_twolines(mode, status, lines, starvation))
    return status


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the pressure check and return its exit code."""
    return run_plugin(_run, argv)