"""Check of the network interface statistics."""

from __future__ import annotations

import argparse
import os
import sys
from enum import Enum
from typing import Iterable, Optional, Sequence, Tuple

from .netinfo import DUPLEX_HALF, Interface, NetOptions, netinfo
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

MAX_PRINTED_INTERFACES = 5


class NetworkCheck(Enum):
    """The counter compared with the thresholds."""

    BYTES = "bytes"
    COLLISIONS = "collisions"
    DROPPED = "dropped"
    ERRORS = "errors"
    MULTICAST = "multicast"


_CHECKS = (
    ("network_collisions", NetworkCheck.COLLISIONS, "network collisions"),
    ("network_dropped", NetworkCheck.DROPPED, "network dropped"),
    ("network_errors", NetworkCheck.ERRORS, "network errors"),
    ("network_multicast", NetworkCheck.MULTICAST, "network multicast"),
)


def threshold_metric(tx: int, rx: int, tx_only: bool = False,
                     rx_only: bool = False) -> int:
    """Return the traffic considered by the thresholds."""
    return (0 if tx_only else rx) + (0 if rx_only else tx)


def ratio_over_speed(counter: float, speed: int) -> float:
    """Return the counter as a percentage of the link speed."""
    return (100.0 / speed) * counter


def format_perfdata_bytes(ifname: str, label: str, counter: int, speed: int,
                          perc: bool = False) -> str:
    """Format a byte counter as a perfdata item."""
    if perc and speed > 0:
        return (f"{ifname}_{label}/s={ratio_over_speed(counter, speed):.2f}%"
                ";;;0;100.0")
    if speed > 0:
        return f"{ifname}_{label}/s={counter};;;0;{speed}"
    return f"{ifname}_{label}/s={counter}"


def check_for_program(program_name: str) -> Tuple[NetworkCheck, str]:
    """Return the check selected by the program name and its display name."""
    name = os.path.basename(program_name)
    if len(name) <= len("check_") or not name.startswith("check_"):
        raise PluginError("bug: the plugin does not have a standard name")
    rest = name[len("check_"):]
    for prefix, check, display in _CHECKS:
        if rest.startswith(prefix):
            return check, display
    return NetworkCheck.BYTES, "network"


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="This plugin displays some network interfaces statistics.",
        epilog="The option --ifname supports regular expressions. "
               "You cannot select both --rx-only and --tx-only.",
    )
    parser.add_argument("-i", "--ifname", metavar="REGEX",
                        help="only display interfaces matching a regular "
                             "expression")
    parser.add_argument("--ifname-debug", dest="ifname_debug",
                        action="store_true",
                        help="display the list of metric keys and exit")
    parser.add_argument("-k", "--check-link", dest="check_link",
                        action="store_true",
                        help="report an error if at least a link is down")
    parser.add_argument("-l", "--no-loopback", dest="no_loopback",
                        action="store_true", help="skip the loopback interface")
    parser.add_argument("-W", "--no-wireless", dest="no_wireless",
                        action="store_true", help="skip the wireless interfaces")
    parser.add_argument("-%", "--perc", action="store_true",
                        help="return percentage metrics if possible")
    parser.add_argument("-w", "--warning", metavar="COUNTER",
                        help="warning threshold")
    parser.add_argument("-c", "--critical", metavar="COUNTER",
                        help="critical threshold")
    parser.add_argument("-b", "--no-bytes", dest="no_bytes", action="store_true",
                        help="omit the rx/tx bytes counter from perfdata")
    parser.add_argument("-C", "--no-collisions", dest="no_collisions",
                        action="store_true",
                        help="omit the collisions counter from perfdata")
    parser.add_argument("-d", "--no-drops", dest="no_drops", action="store_true",
                        help="omit the rx/tx drop counters from perfdata")
    parser.add_argument("-e", "--no-errors", dest="no_errors",
                        action="store_true",
                        help="omit the rx/tx errors counters from perfdata")
    parser.add_argument("-m", "--no-multicast", dest="no_multicast",
                        action="store_true",
                        help="omit the multicast counter from perfdata")
    parser.add_argument("-p", "--no-packets", dest="no_packets",
                        action="store_true",
                        help="omit the rx/tx packets counter from perfdata")
    parser.add_argument("-r", "--rx-only", dest="rx_only", action="store_true",
                        help="consider the received traffic only in the "
                             "thresholds")
    parser.add_argument("-t", "--tx-only", dest="tx_only", action="store_true",
                        help="consider the transmitted traffic only in the "
                             "thresholds")
    parser.add_argument("-V", "--version", action="version",
                        version="%(prog)s (linuxprobes)")
    parser.add_argument("delay", nargs="?",
                        help="delay between the two network snapshots in "
                             f"seconds (default: {DELAY_DEFAULT}sec)")
    return parser


def _options(opts) -> NetOptions:
    options = NetOptions.NONE
    for attr, flag in (
        ("check_link", NetOptions.CHECK_LINK),
        ("no_loopback", NetOptions.NO_LOOPBACK),
        ("no_wireless", NetOptions.NO_WIRELESS),
        ("no_bytes", NetOptions.NO_BYTES),
        ("no_collisions", NetOptions.NO_COLLISIONS),
        ("no_drops", NetOptions.NO_DROPS),
        ("no_errors", NetOptions.NO_ERRORS),
        ("no_multicast", NetOptions.NO_MULTICAST),
        ("no_packets", NetOptions.NO_PACKETS),
        ("rx_only", NetOptions.RX_ONLY),
        ("tx_only", NetOptions.TX_ONLY),
    ):
        if getattr(opts, attr):
            options |= flag
    return options


def _byte_speed(iface: Interface) -> int:
    return iface.speed * 1000 * 1000 // 8 if iface.speed > 0 else 0


def _perfdata(iface: Interface, speed: int, opts) -> str:
    name, stats = iface.name, iface.stats
    parts = []
    if not opts.no_bytes:
        parts.append(format_perfdata_bytes(name, "txbyte", stats.tx_bytes,
                                           speed, opts.perc))
        parts.append(format_perfdata_bytes(name, "rxbyte", stats.rx_bytes,
                                           speed, opts.perc))
    if not opts.no_errors:
        parts.append(f"{name}_txerr/s={stats.tx_errors} "
                     f"{name}_rxerr/s={stats.rx_errors}")
    if not opts.no_drops:
        parts.append(f"{name}_txdrop/s={stats.tx_dropped} "
                     f"{name}_rxdrop/s={stats.rx_dropped}")
    if not opts.no_packets:
        parts.append(f"{name}_txpck/s={stats.tx_packets} "
                     f"{name}_rxpck/s={stats.rx_packets}")
    if not opts.no_collisions:
        parts.append(f"{name}_coll/s={stats.collisions}")
    if not opts.no_multicast:
        parts.append(f"{name}_mcast/s={stats.multicast}")
    return "".join(part + " " for part in parts)


def _print_ifname_debug(interfaces: Iterable[Interface], opts) -> None:
    for iface in interfaces:
        keys = [item.split("=", 1)[0]
                for item in _perfdata(iface, 0, opts).split()]
        print(f"{iface.name}: {' '.join(keys)}")


def _counter(check: NetworkCheck, iface: Interface, speed: int, opts) -> float:
    stats = iface.stats
    if check is NetworkCheck.COLLISIONS:
        return stats.collisions
    if check is NetworkCheck.DROPPED:
        return threshold_metric(stats.tx_dropped, stats.rx_dropped,
                                opts.tx_only, opts.rx_only)
    if check is NetworkCheck.ERRORS:
        return threshold_metric(stats.tx_errors, stats.rx_errors,
                                opts.tx_only, opts.rx_only)
    if check is NetworkCheck.MULTICAST:
        return stats.multicast
    counter = threshold_metric(stats.tx_bytes, stats.rx_bytes,
                               opts.tx_only, opts.rx_only)
    if opts.perc and speed > 0:
        return ratio_over_speed(counter, speed)
    return counter


def _invoked_name() -> str:
    return os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else ""


def _run(args: list) -> Status:
    opts = _parser().parse_args(args)

    if opts.ifname_debug and opts.delay is not None:
        raise UsageError("no delay can be given with --ifname-debug")
    delay = 0 if opts.ifname_debug else DELAY_DEFAULT
    if opts.delay is not None:
        delay = parse_delay(opts.delay)
    if opts.tx_only and opts.rx_only:
        raise UsageError("--rx-only and --tx-only cannot be used together")

    check, progname = check_for_program(_invoked_name())
    disabled = {
        NetworkCheck.COLLISIONS: opts.no_collisions,
        NetworkCheck.DROPPED: opts.no_drops,
        NetworkCheck.ERRORS: opts.no_errors,
        NetworkCheck.MULTICAST: opts.no_multicast,
    }
    if disabled.get(check, False):
        raise UsageError(f"the {check.value} counter cannot be omitted")

    interfaces = netinfo(_options(opts), opts.ifname, delay)

    if opts.ifname_debug:
        _print_ifname_debug(interfaces, opts)
        return Status.UNKNOWN

    thresholds = set_thresholds(opts.warning, opts.critical)
    status = Status.OK
    perfdata = ""
    for iface in interfaces:
        speed = _byte_speed(iface)
        if opts.perc and (opts.warning or opts.critical) and speed <= 0:
            if iface.is_up and iface.is_running:
                reason = ": physical speed is not available"
            else:
                reason = ": link is not UP/RUNNING"
            raise PluginError(f"metrics of {iface.name} cannot be converted "
                              f"into percentages{reason}")
        if iface.duplex == DUPLEX_HALF:
            speed //= 2

        counter = _counter(check, iface, speed, opts)
        status = max(status, get_status(counter, thresholds))
        perfdata += _perfdata(iface, speed, opts)

    if not interfaces:
        status = Status.UNKNOWN

    names = ",".join(iface.name for iface in interfaces[:MAX_PRINTED_INTERFACES])
    if len(interfaces) > MAX_PRINTED_INTERFACES:
        names += ",..."
    print(f"{progname} {state_text(status)} - found {len(interfaces)} "
          f"interface(s): {names} | {perfdata}")
    return status


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the network check and return its exit code."""
    return run_plugin(_run, argv)