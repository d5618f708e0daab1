"""Check of the TCP socket states found in the proc filesystem."""

from __future__ import annotations

import argparse
import os
from collections import Counter
from dataclasses import dataclass, fields
from enum import IntEnum
from pathlib import Path
from typing import Optional, Sequence

from .plugin import PluginError, Status, run_plugin, state_text
from .thresholds import get_status, set_thresholds

PROGRAM_NAME = "check_tcpcount"
_PROGRAM_SHORT = "tcpcount"
_PROC_ENV = "NPL_TESTING_PATH_PROC"


class TcpState(IntEnum):
    """Socket states as numbered by the kernel in /proc/net/tcp."""

    ESTABLISHED = 0x01
    SYN_SENT = 0x02
    SYN_RECV = 0x03
    FIN_WAIT1 = 0x04
    FIN_WAIT2 = 0x05
    TIME_WAIT = 0x06
    CLOSE = 0x07
    CLOSE_WAIT = 0x08
    LAST_ACK = 0x09
    LISTEN = 0x0A
    CLOSING = 0x0B


@dataclass(frozen=True)
class TcpTable:
    """Number of sockets in each TCP state."""

    established: int = 0
    syn_sent: int = 0
    syn_recv: int = 0
    fin_wait1: int = 0
    fin_wait2: int = 0
    time_wait: int = 0
    close: int = 0
    close_wait: int = 0
    last_ack: int = 0
    listen: int = 0
    closing: int = 0

    def __add__(self, other: "TcpTable") -> "TcpTable":
        if not isinstance(other, TcpTable):
            return NotImplemented
        return TcpTable(**{
            field.name: getattr(self, field.name) + getattr(other, field.name)
            for field in fields(self)
        })

    def count(self, state: TcpState) -> int:
        """Return the number of sockets in the given state."""
        return getattr(self, TcpState(state).name.lower())


def count_tcp_states(text: str) -> TcpTable:
    """Count the socket states listed in the text of a proc tcp table."""
    counter: Counter = Counter()
    for line in text.splitlines()[1:]:
        parts = line.split()
        if len(parts) < 4:
            continue
        try:
            state = TcpState(int(parts[3], 16))
        except ValueError:
            continue
        counter[state] += 1
    return TcpTable(**{state.name.lower(): counter[state] for state in TcpState})


def _proc_root() -> str:
    return os.environ.get(_PROC_ENV) or "/proc"


def read_tcptable(use_v4: bool = True, use_v6: bool = False,
                  proc_root: Optional[str] = None) -> TcpTable:
    """Read and count the IPv4 and/or IPv6 TCP tables."""
    root = Path(proc_root if proc_root is not None else _proc_root())
    names = []
    if use_v4:
        names.append("tcp")
    if use_v6:
        names.append("tcp6")
    table = TcpTable()
    for name in names:
        path = root / "net" / name
        try:
            text = path.read_text()
        except OSError as err:
            raise PluginError(f"cannot open {path}: {err.strerror}") from err
        table = table + count_tcp_states(text)
    return table


def format_tcpcount(table: TcpTable, status: Status) -> str:
    """Return the status message and perfdata, separated by ' | '."""
    perfdata = " ".join(
        f"tcp_{field.name}={getattr(table, field.name)}" for field in fields(table)
    )
    return (f"{state_text(status)} - {table.established} tcp established "
            f"| {perfdata}")


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROGRAM_NAME,
        description="This plugin displays TCP network and socket informations.",
    )
    parser.add_argument("-t", "--tcp", action="store_true",
                        help="display the statistics for the TCP protocol "
                             "(the default)")
    parser.add_argument("-6", "--tcp6", action="store_true",
                        help="display the statistics for the TCPv6 protocol")
    parser.add_argument("-c", "--critical", metavar="COUNTER",
                        help="critical threshold")
    parser.add_argument("-w", "--warning", metavar="COUNTER",
                        help="warning threshold")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="show details for command-line debugging")
    parser.add_argument("-V", "--version", action="version",
                        version="%(prog)s (linuxprobes)")
    return parser


def _run(args: list) -> Status:
    opts = _parser().parse_args(args)
    use_v4 = opts.tcp or not opts.tcp6
    thresholds = set_thresholds(opts.warning, opts.critical)
    table = read_tcptable(use_v4, opts.tcp6)
    status = get_status(table.established, thresholds)
    print(f"{_PROGRAM_SHORT} {format_tcpcount(table, status)}")
    return status


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the TCP count check and return its exit code."""
    return run_plugin(_run, argv)