"""Check of memory and swap paging activity."""

from __future__ import annotations

import argparse
import time
from dataclasses import dataclass
from typing import Optional, Sequence

from .plugin import Status, run_plugin, state_text
from .procfs import VmStat, read_vmstat
from .thresholds import get_status, set_thresholds

PROGRAM_NAME = "check_paging"
_PROGRAM_SHORT = "paging"
_ULONG_MODULUS = 1 << 64

_COUNTERS = (
    "pgpgin", "pgpgout", "pgfault", "pgfree", "pgmajfault",
    "pgscand", "pgscank", "pgsteal", "pswpin", "pswpout",
)


@dataclass(frozen=True)
class PagingData:
    """Per-second paging counters taken from two vmstat samples."""

    dpgpgin: int = 0
    dpgpgout: int = 0
    dpgfault: int = 0
    dpgfree: int = 0
    dpgmajfault: int = 0
    dpgscand: int = 0
    dpgscank: int = 0
    dpgsteal: int = 0
    dpswpin: int = 0
    dpswpout: int = 0
    summary: int = 0


def _delta(after: int, before: int) -> int:
    # counters are unsigned: a decrease wraps around
    return (after - before) % _ULONG_MODULUS


def compute_paging(before: VmStat, after: VmStat,
                   swapping_only: bool = False) -> PagingData:
    """Return the counter differences between two samples taken one second apart."""
    deltas = {
        f"d{name}": _delta(getattr(after, name), getattr(before, name))
        for name in _COUNTERS
    }
    if swapping_only:
        summary = deltas["dpswpin"] + deltas["dpswpout"]
    else:
        summary = deltas["dpgmajfault"]
    return PagingData(summary=summary, **deltas)


def format_paging(paging: PagingData, status: Status,
                  swapping_only: bool = False,
                  show_swapping: bool = False) -> str:
    """Return the status message and perfdata, separated by ' | '."""
    unit = "pswp" if swapping_only else "majfault"
    message = f"{state_text(status)}: {paging.summary} {unit}/s"
    perfdata = ""
    if not swapping_only:
        perfdata += (
            f"vmem_pgpgin/s={paging.dpgpgin} vmem_pgpgout/s={paging.dpgpgout} "
            f"vmem_pgfault/s={paging.dpgfault} "
            f"vmem_pgmajfault/s={paging.dpgmajfault} "
            f"vmem_pgfree/s={paging.dpgfree} vmem_pgsteal/s={paging.dpgsteal} "
            f"vmem_pgscand/s={paging.dpgscand} "
            f"vmem_pgscank/s={paging.dpgscank} "
        )
    if show_swapping or swapping_only:
        perfdata += (
            f"vmem_pswpin/s={paging.dpswpin} vmem_pswpout/s={paging.dpswpout}"
        )
    return f"{message} | {perfdata}"


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROGRAM_NAME,
        description="This plugin checks the memory and swap paging.",
        epilog="PAGES is the sum of 'pswpin' and 'pswpout' per second, if "
               "--swapping-only has been specified, or the number of "
               "'majfault/s' otherwise.",
    )
    parser.add_argument("-p", "--paging", action="store_true",
                        help=argparse.SUPPRESS)
    parser.add_argument("-s", "--swapping", action="store_true",
                        help="display also the swap reads and writes")
    parser.add_argument("-S", "--swapping-only", dest="swapping_only",
                        action="store_true",
                        help="only display the swap reads and writes")
    parser.add_argument("-c", "--critical", metavar="PAGES",
                        help="critical threshold")
    parser.add_argument("-w", "--warning", metavar="PAGES",
                        help="warning threshold")
    parser.add_argument("-V", "--version", action="version",
                        version="%(prog)s (linuxprobes)")
    return parser


def _sample(swapping_only: bool) -> PagingData:
    readings = []
    for _ in range(2):
        readings.append(read_vmstat())
        time.sleep(1)
    return compute_paging(readings[0], readings[1], swapping_only)


def _run(args: list) -> Status:
    opts = _parser().parse_args(args)
    thresholds = set_thresholds(opts.warning, opts.critical)
    paging = _sample(opts.swapping_only)
    status = get_status(paging.summary, thresholds)
    report = format_paging(paging, status, opts.swapping_only, opts.swapping)
    print(f"{_PROGRAM_SHORT} {report}")
    return status


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the paging check and return its exit code."""
    return run_plugin(_run, argv)