"""Check of the swap utilization."""

from __future__ import annotations

import argparse
import time
from typing import Optional, Sequence, Tuple

from .plugin import Status, UsageError, run_plugin, state_text
from .procfs import MemInfo, read_meminfo, read_vmstat
from .thresholds import get_status, set_thresholds, thresholds_expressed_as_percentages
from .units import UnitShift, unit_convert, unit_label

PROGRAM_NAME = "check_swap"
_PROGRAM_SHORT = "swap"
_ULONG_MODULUS = 1 << 64


def swap_percent_used(meminfo: MemInfo) -> float:
    """Return the used share of swap in percent, or 0 without swap."""
    if meminfo.swap_total == 0:
        return 0.0
    return meminfo.swap_used * 100.0 / meminfo.swap_total


def format_swap(meminfo: MemInfo, status: Status,
                shift: UnitShift = UnitShift.K,
                vmem_delta: Optional[Tuple[int, int]] = None) -> str:
    """Return the status message and perfdata, separated by ' | '.

    vmem_delta, when given, holds the swap page-ins and page-outs per second.
    """
    label = unit_label(shift)

    def value(kilobytes: int) -> str:
        return f"{unit_convert(kilobytes, shift)}{label}"

    percent = swap_percent_used(meminfo)
    message = (f"{state_text(status)}: {percent:.2f}% "
               f"({unit_convert(meminfo.swap_used, shift)} {label}) used")
    perfdata = (f"swap_total={value(meminfo.swap_total)} "
                f"swap_used={value(meminfo.swap_used)} "
                f"swap_free={value(meminfo.swap_free)} "
                f"swap_cached={value(meminfo.swap_cached)}")
    if vmem_delta is not None:
        pageins, pageouts = vmem_delta
        perfdata += f", swap_pageins/s={pageins} swap_pageouts/s={pageouts}"
    return f"{message} | {perfdata}"


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROGRAM_NAME,
        description="This plugin checks the swap utilization.",
        epilog="example: %(prog)s --vmstats -w 30%% -c 50%%",
    )
    parser.add_argument("-s", "--vmstats", action="store_true",
                        help="display the virtual memory perfdata")
    parser.add_argument("-c", "--critical", metavar="PERCENT",
                        help="critical threshold")
    parser.add_argument("-w", "--warning", metavar="PERCENT",
                        help="warning threshold")
    for flag, long_name, shift, text in (
        ("-b", "--byte", UnitShift.B, "bytes"),
        ("-k", "--kilobyte", UnitShift.K, "KB (the default)"),
        ("-m", "--megabyte", UnitShift.M, "MB"),
        ("-g", "--gigabyte", UnitShift.G, "GB"),
    ):
        parser.add_argument(flag, long_name, dest="shift", action="store_const",
                            const=shift, help=f"show output in {text}")
    parser.set_defaults(shift=UnitShift.K)
    parser.add_argument("-V", "--version", action="version",
                        version="%(prog)s (linuxprobes)")
    return parser


def _swap_activity() -> Tuple[int, int]:
    first = read_vmstat()
    time.sleep(1)
    second = read_vmstat()
    return ((second.pswpin - first.pswpin) % _ULONG_MODULUS,
            (second.pswpout - first.pswpout) % _ULONG_MODULUS)


def _run(args: list) -> Status:
    opts = _parser().parse_args(args)
    if not thresholds_expressed_as_percentages(opts.warning, opts.critical):
        raise UsageError("thresholds must be expressed as percentages")
    thresholds = set_thresholds(opts.warning, opts.critical)

    meminfo = read_meminfo()
    vmem_delta = _swap_activity() if opts.vmstats else None

    status = get_status(swap_percent_used(meminfo), thresholds)
    print(f"{_PROGRAM_SHORT} {format_swap(meminfo, status, opts.shift, vmem_delta)}")
    return status


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the swap check and return its exit code."""
    return run_plugin(_run, argv)