"""Check of the number of logged on users."""

from __future__ import annotations

import argparse
import os
import struct
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from .plugin import Status, run_plugin, state_text
from .thresholds import get_status, set_thresholds

PROGRAM_NAME = "check_users"
_PROGRAM_SHORT = "users"
_UTMP_ENV = "NPL_TESTING_PATH_UTMP"
_UTMP_DEFAULT = "/var/run/utmp"

USER_PROCESS = 7

# Linux struct utmp: type, pid, line, id, user, host, exit status,
# session, tv_sec, tv_usec, addr_v6, unused.
_UTMP_STRUCT = struct.Struct("<hxxi32s4s32s256shhiii16s20x")


def _cstring(raw: bytes) -> str:
    return raw.split(b"\0", 1)[0].decode("utf-8", errors="replace")


@dataclass(frozen=True)
class UtmpRecord:
    """One login record of the utmp database."""

    type: int
    pid: int
    line: str
    id: str
    user: str
    host: str
    tv_sec: int = 0


def parse_utmp(data: bytes) -> List[UtmpRecord]:
    """Decode utmp records, ignoring a trailing partial record."""
    usable = len(data) - len(data) % _UTMP_STRUCT.size
    records = []
    for fields in _UTMP_STRUCT.iter_unpack(data[:usable]):
        (ut_type, pid, line, ut_id, user, host,
         _term, _exit, _session, tv_sec, _tv_usec, _addr) = fields
        records.append(UtmpRecord(
            type=ut_type,
            pid=pid,
            line=_cstring(line),
            id=_cstring(ut_id),
            user=_cstring(user),
            host=_cstring(host),
            tv_sec=tv_sec,
        ))
    return records


def logged_users(records: Iterable[UtmpRecord]) -> List[UtmpRecord]:
    """Return the records of user processes with a user name."""
    return [record for record in records
            if record.type == USER_PROCESS and record.user]


def format_users(count: int, status: Status) -> str:
    """Return the status message and perfdata, separated by ' | '."""
    plural = "" if count == 1 else "s"
    return (f"{state_text(status)} - {count} user{plural} logged on "
            f"| logged_users={count}")


def _read_records() -> List[UtmpRecord]:
    path = Path(os.environ.get(_UTMP_ENV) or _UTMP_DEFAULT)
    try:
        data = path.read_bytes()
    except OSError:
        return []
    return parse_utmp(data)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROGRAM_NAME,
        description="This plugin displays the number of users that are "
                    "currently logged on.",
    )
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
    thresholds = set_thresholds(opts.warning, opts.critical)

    users = logged_users(_read_records())
    if opts.verbose:
        print("user       PID line   host      date/time")
        for record in users:
            print(f"{record.user:<8} {record.pid:5d} {record.line[:6]:<6} "
                  f"{record.host[:9]:<9} {time.ctime(record.tv_sec)}")

    status = get_status(len(users), thresholds)
    print(f"{_PROGRAM_SHORT} {format_users(len(users), status)}")
    return status


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the users check and return its exit code."""
    return run_plugin(_run, argv)