"""Network interface statistics read from the sysfs net class tree."""

from __future__ import annotations

import os
import re
import time
from dataclasses import dataclass, field, fields
from enum import IntFlag
from pathlib import Path
from typing import Iterable, List, Optional

from .plugin import PluginError, Status

SYSFS_NET_ENV = "NPL_TESTING_PATH_SYS_CLASS_NET"
_SYSFS_NET_DEFAULT = "/sys/class/net"
_COUNTER_MODULUS = 1 << 32

IFF_UP = 0x1
IFF_LOOPBACK = 0x8
IFF_RUNNING = 0x40

DUPLEX_HALF = 0x00
DUPLEX_FULL = 0x01
DUPLEX_UNKNOWN = 0xFF

_DUPLEX_NAMES = {"half": DUPLEX_HALF, "full": DUPLEX_FULL}


class NetOptions(IntFlag):
    """Selection and reporting options of the network check."""

    NONE = 0
    CHECK_LINK = 1 << 0
    NO_LOOPBACK = 1 << 1
    NO_WIRELESS = 1 << 2
    NO_BYTES = 1 << 3
    NO_COLLISIONS = 1 << 4
    NO_DROPS = 1 << 4
    NO_ERRORS = 1 << 5
    NO_MULTICAST = 1 << 6
    NO_PACKETS = 1 << 7
    RX_ONLY = 1 << 8
    TX_ONLY = 1 << 9


@dataclass(frozen=True)
class IfStats:
    """Traffic counters of one interface."""

    tx_packets: int = 0
    rx_packets: int = 0
    tx_bytes: int = 0
    rx_bytes: int = 0
    tx_errors: int = 0
    rx_errors: int = 0
    tx_dropped: int = 0
    rx_dropped: int = 0
    collisions: int = 0
    multicast: int = 0

    def __sub__(self, other: "IfStats") -> "IfStats":
        if not isinstance(other, IfStats):
            return NotImplemented
        # counters are 32-bit unsigned: a decrease wraps around
        return IfStats(**{
            f.name: (getattr(self, f.name) - getattr(other, f.name))
            % _COUNTER_MODULUS
            for f in fields(self)
        })

    def per_second(self, seconds: int) -> "IfStats":
        """Return the counters divided by a number of seconds."""
        return IfStats(**{f.name: getattr(self, f.name) // seconds
                          for f in fields(self)})


@dataclass(frozen=True)
class Interface:
    """A network interface with its link properties and counters.

    speed is in Mbps, 0 when unknown.
    """

    name: str
    duplex: int = DUPLEX_UNKNOWN
    speed: int = 0
    flags: int = 0
    stats: IfStats = field(default_factory=IfStats)

    @property
    def is_up(self) -> bool:
        return bool(self.flags & IFF_UP)

    @property
    def is_running(self) -> bool:
        return bool(self.flags & IFF_RUNNING)

    @property
    def is_loopback(self) -> bool:
        return bool(self.flags & IFF_LOOPBACK)


def _sysfs_root() -> str:
    return os.environ.get(SYSFS_NET_ENV) or _SYSFS_NET_DEFAULT


def _read_text(path: Path) -> Optional[str]:
    try:
        return path.read_text().strip()
    except OSError:
        return None


def _read_int(path: Path, base: int = 10) -> Optional[int]:
    text = _read_text(path)
    if text is None:
        return None
    try:
        return int(text, base)
    except ValueError:
        return None


def _read_interface(path: Path) -> Interface:
    flags = _read_int(path / "flags", 0) or 0
    if _read_text(path / "operstate") == "up" or _read_text(path / "carrier") == "1":
        flags |= IFF_RUNNING
    speed = _read_int(path / "speed") or 0
    duplex = _DUPLEX_NAMES.get(_read_text(path / "duplex") or "", DUPLEX_UNKNOWN)
    stats_dir = path / "statistics"
    stats = IfStats(**{
        f.name: _read_int(stats_dir / f.name) or 0 for f in fields(IfStats)
    })
    return Interface(name=path.name, duplex=duplex, speed=max(speed, 0),
                     flags=flags, stats=stats)


def _is_wireless(path: Path) -> bool:
    return (path / "wireless").exists() or (path / "phy80211").exists()


def read_interfaces(options: int = NetOptions.NONE,
                    ifname_regex: Optional[str] = None,
                    sysfs_root: Optional[str] = None) -> List[Interface]:
    """Take a snapshot of the interfaces selected by the options and regex."""
    options = NetOptions(options)
    pattern = None
    if ifname_regex is not None:
        try:
            pattern = re.compile(ifname_regex)
        except re.error as err:
            raise PluginError(
                f"could not compile regex: {ifname_regex}: {err}") from err

    root = Path(sysfs_root if sysfs_root is not None else _sysfs_root())
    if not root.is_dir():
        raise PluginError(f"the sysfs tree {root} is not available")

    interfaces = []
    for entry in sorted(root.iterdir(), key=lambda p: p.name):
        if not entry.is_dir():
            continue
        if pattern is not None and not pattern.search(entry.name):
            continue
        if options & NetOptions.NO_WIRELESS and _is_wireless(entry):
            continue
        iface = _read_interface(entry)
        if options & NetOptions.NO_LOOPBACK and iface.is_loopback:
            continue
        interfaces.append(iface)
    return interfaces


def interface_deltas(before: Iterable[Interface], after: Iterable[Interface],
                     seconds: int) -> List[Interface]:
    """Return the interfaces of the second snapshot with per-second counters."""
    if seconds < 1:
        raise ValueError("seconds must be a positive integer")
    previous = {iface.name: iface for iface in before}
    result = []
    for iface in after:
        old = previous.get(iface.name)
        if old is None:
            continue
        stats = (iface.stats - old.stats).per_second(seconds)
        result.append(Interface(name=iface.name, duplex=iface.duplex,
                                speed=iface.speed, flags=iface.flags,
                                stats=stats))
    return result


def netinfo(options: int = NetOptions.NONE,
            ifname_regex: Optional[str] = None,
            seconds: int = 0,
            sysfs_root: Optional[str] = None) -> List[Interface]:
    """Return the selected interfaces with their counters per second.

    With zero seconds a single snapshot with the raw counters is returned.
    """
    options = NetOptions(options)
    before = read_interfaces(options, ifname_regex, sysfs_root)
    if options & NetOptions.CHECK_LINK:
        for iface in before:
            if not (iface.is_up and iface.is_running):
                raise PluginError(
                    f"{iface.name} matches the given regular expression "
                    "but is not UP and RUNNING", Status.CRITICAL)
    if seconds <= 0:
        return before
    time.sleep(seconds)
    after = read_interfaces(options, ifname_regex, sysfs_root)
    return interface_deltas(before, after, seconds)