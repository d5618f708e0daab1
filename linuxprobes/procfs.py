"""Readers for /proc/meminfo and /proc/vmstat."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Union

from .plugin import PluginError, Status

PathLike = Union[str, "os.PathLike[str]"]

_MEMINFO_ENV = "NPL_TESTING_PATH_PROC_MEMINFO"
_VMSTAT_ENV = "NPL_TESTING_PATH_PROC_VMSTAT"


def parse_key_values(text: str, separator: str = ":") -> dict:
    """Parse 'name<separator> value [unit]' lines into a name-to-int mapping."""
    values = {}
    for line in text.splitlines():
        name, sep, rest = line.partition(separator)
        if not sep:
            continue
        fields = rest.split()
        if not fields or not name.strip():
            continue
        try:
            values[name.strip()] = int(fields[0])
        except ValueError:
            continue
    return values


def meminfo_path() -> str:
    """Return the meminfo path, overridable through the environment."""
    return os.environ.get(_MEMINFO_ENV) or "/proc/meminfo"


def vmstat_path() -> str:
    """Return the vmstat path, overridable through the environment."""
    return os.environ.get(_VMSTAT_ENV) or "/proc/vmstat"


def _read(path: PathLike) -> str:
    try:
        return Path(path).read_text()
    except OSError as err:
        raise PluginError(f"cannot open {os.fspath(path)}: {err.strerror}",
                          Status.UNKNOWN) from err


@dataclass(frozen=True)
class MemInfo:
    """System memory figures, in kilobytes."""

    active: int = 0
    anon_pages: int = 0
    committed_as: int = 0
    dirty: int = 0
    inactive: int = 0
    main_available: int = 0
    main_buffers: int = 0
    main_cached: int = 0
    main_free: int = 0
    main_shared: int = 0
    main_total: int = 0
    main_used: int = 0
    swap_cached: int = 0
    swap_free: int = 0
    swap_total: int = 0
    swap_used: int = 0

    @classmethod
    def from_values(cls, values: Mapping[str, int]) -> "MemInfo":
        """Build the figures from parsed meminfo fields."""
        total = values.get("MemTotal", 0)
        free = values.get("MemFree", 0)
        buffers = values.get("Buffers", 0)
        cached = values.get("Cached", 0) + values.get("SReclaimable", 0)
        used = total - free - cached - buffers
        if used < 0:
            used = total - free
        swap_total = values.get("SwapTotal", 0)
        swap_free = values.get("SwapFree", 0)
        return cls(
            active=values.get("Active", 0),
            anon_pages=values.get("AnonPages", 0),
            committed_as=values.get("Committed_AS", 0),
            dirty=values.get("Dirty", 0),
            inactive=values.get("Inactive", 0),
            main_available=values.get("MemAvailable", free),
            main_buffers=buffers,
            main_cached=cached,
            main_free=free,
            main_shared=values.get("Shmem", values.get("MemShared", 0)),
            main_total=total,
            main_used=used,
            swap_cached=values.get("SwapCached", 0),
            swap_free=swap_free,
            swap_total=swap_total,
            swap_used=swap_total - swap_free,
        )


def _summed(values: Mapping[str, int], *names: str, exclude=()) -> int:
    return sum(
        value for key, value in values.items()
        if key not in exclude
        and any(key == name or key.startswith(name + "_") for name in names)
    )


@dataclass(frozen=True)
class VmStat:
    """Virtual memory counters."""

    pgalloc: int = 0
    pgfault: int = 0
    pgfree: int = 0
    pgmajfault: int = 0
    pgpgin: int = 0
    pgpgout: int = 0
    pgrefill: int = 0
    pgscan: int = 0
    pgscand: int = 0
    pgscank: int = 0
    pgsteal: int = 0
    pswpin: int = 0
    pswpout: int = 0

    @classmethod
    def from_values(cls, values: Mapping[str, int]) -> "VmStat":
        """Build the counters from parsed vmstat fields, summing per-zone ones."""
        pgscand = _summed(values, "pgscan_direct", exclude=("pgscan_direct_throttle",))
        pgscank = _summed(values, "pgscan_kswapd")
        pgsteal = _summed(values, "pgsteal_kswapd", "pgsteal_direct")
        if not any(k.startswith(("pgsteal_kswapd", "pgsteal_direct")) for k in values):
            pgsteal = _summed(values, "pgsteal", exclude=("pgsteal_anon", "pgsteal_file"))
        return cls(
            pgalloc=_summed(values, "pgalloc"),
            pgfault=values.get("pgfault", 0),
            pgfree=values.get("pgfree", 0),
            pgmajfault=values.get("pgmajfault", 0),
            pgpgin=values.get("pgpgin", 0),
            pgpgout=values.get("pgpgout", 0),
            pgrefill=_summed(values, "pgrefill"),
            pgscan=pgscand + pgscank,
            pgscand=pgscand,
            pgscank=pgscank,
            pgsteal=pgsteal,
            pswpin=values.get("pswpin", 0),
            pswpout=values.get("pswpout", 0),
        )


def read_meminfo(path: Optional[PathLike] = None) -> MemInfo:
    """Read and parse the meminfo file."""
    text = _read(path if path is not None else meminfo_path())
    return MemInfo.from_values(parse_key_values(text, ":"))


def read_vmstat(path: Optional[PathLike] = None) -> VmStat:
    """Read and parse the vmstat file."""
    text = _read(path if path is not None else vmstat_path())
    return VmStat.from_values(parse_key_values(text, " "))