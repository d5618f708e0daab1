"""Check of the hardware temperature reported by the thermal sysfs tree."""

from __future__ import annotations

import argparse
import os
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from .plugin import PluginError, Status, run_plugin, state_text
from .thresholds import get_status, set_thresholds

PROGRAM_NAME = "check_temperature"
_PROGRAM_SHORT = "temperature"
PATH_SYS = "/sys"
_THERMAL_ENV = "NPL_TESTING_PATH_SYS_THERMAL"
_ZONE_NAME = re.compile(r"thermal_zone(\d+)")
_ABSOLUTE_ZERO = 273.1


class TempUnit(Enum):
    """Temperature scales for the output."""

    KELVIN = "K"
    CELSIUS = "C"
    FAHRENHEIT = "F"


@dataclass(frozen=True)
class ThermalZone:
    """One thermal zone: temperatures are in millidegrees Celsius."""

    number: int
    temperature: int
    type: Optional[str] = None
    critical: int = 0
    device: str = "n/a"


def real_temperature(millidegrees: int, unit: TempUnit) -> Tuple[float, str]:
    """Convert a sysfs reading into the chosen unit and return it with its scale."""
    value = millidegrees / 1000.0
    if unit is TempUnit.CELSIUS:
        return value, "°C"
    if unit is TempUnit.FAHRENHEIT:
        return value * 1.8 + 32, "°F"
    return value + _ABSOLUTE_ZERO, "°K"


def thermal_sysfs_path() -> str:
    """Return the thermal class directory, overridable through the environment."""
    return os.environ.get(_THERMAL_ENV) or f"{PATH_SYS}/class/thermal"


def _first_line(path: Path) -> Optional[str]:
    try:
        with path.open() as handle:
            return handle.readline().strip()
    except OSError:
        return None


def _int_value(path: Path) -> Optional[int]:
    text = _first_line(path)
    if text is None:
        return None
    try:
        return int(text)
    except ValueError:
        return None


def _critical_temperature(zone_dir: Path) -> int:
    for type_file in sorted(zone_dir.glob("trip_point_*_type")):
        if _first_line(type_file) != "critical":
            continue
        temp_file = zone_dir / type_file.name.replace("_type", "_temp")
        value = _int_value(temp_file)
        if value is not None:
            return value
    return 0


def _device(zone_dir: Path) -> str:
    link = zone_dir / "device"
    try:
        return os.path.basename(os.readlink(link))
    except OSError:
        return "n/a"


def list_thermal_zones(root: Optional[str] = None) -> List[ThermalZone]:
    """Return the readable thermal zones, ordered by zone number."""
    base = Path(root if root is not None else thermal_sysfs_path())
    if not base.is_dir():
        raise PluginError(f"the sysfs tree {base} is not available")
    zones = []
    for entry in base.iterdir():
        match = _ZONE_NAME.fullmatch(entry.name)
        if not match:
            continue
        temperature = _int_value(entry / "temp")
        if temperature is None:
            continue
        zones.append(ThermalZone(
            number=int(match.group(1)),
            temperature=temperature,
            type=_first_line(entry / "type") or None,
            critical=_critical_temperature(entry),
            device=_device(entry),
        ))
    return sorted(zones, key=lambda zone: zone.number)


def select_zone(zones: Iterable[ThermalZone],
                selected: Optional[int] = None) -> ThermalZone:
    """Return the selected zone, or the hottest one when none is selected."""
    zones = list(zones)
    if selected is None:
        if not zones:
            raise PluginError("no thermal zones found")
        return max(zones, key=lambda zone: zone.temperature)
    for zone in zones:
        if zone.number == selected:
            return zone
    raise PluginError(f"thermal zone {selected} not found")


def _print_zones(zones: List[ThermalZone]) -> None:
    for zone in zones:
        value, scale = real_temperature(zone.temperature, TempUnit.CELSIUS)
        line = (f"thermal_zone{zone.number}: {value:.1f}{scale}, "
                f"type: \"{zone.type or 'n/a'}\", device: [{zone.device}]")
        if zone.critical > 0:
            critical, _ = real_temperature(zone.critical, TempUnit.CELSIUS)
            line += f", critical: {critical:.1f}{scale}"
        print(line)


def _zone_number(text: str) -> int:
    if not text.isdigit():
        raise PluginError("the option '-t' requires an integer")
    return int(text)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROGRAM_NAME,
        description="This plugin monitors the hardware's temperature.",
        epilog="Without --thermal_zone the zone with the highest temperature "
               "is selected; it may change at each execution.",
    )
    parser.add_argument("-f", "--fahrenheit", dest="unit", action="store_const",
                        const=TempUnit.FAHRENHEIT,
                        help="use fahrenheit as the temperature unit")
    parser.add_argument("-k", "--kelvin", dest="unit", action="store_const",
                        const=TempUnit.KELVIN,
                        help="use kelvin as the temperature unit")
    parser.add_argument("-l", "--list", action="store_true",
                        help="list all the thermal sensors reported by the kernel")
    parser.add_argument("-t", "--thermal_zone", dest="zone",
                        help="only consider a specific thermal zone")
    parser.add_argument("-c", "--critical", metavar="COUNTER",
                        help="critical threshold")
    parser.add_argument("-w", "--warning", metavar="COUNTER",
                        help="warning threshold")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help=argparse.SUPPRESS)
    parser.add_argument("-V", "--version", action="version",
                        version="%(prog)s (linuxprobes)")
    parser.set_defaults(unit=TempUnit.CELSIUS)
    return parser


def _run(args: list) -> Status:
    opts = _parser().parse_args(args)
    if opts.list:
        _print_zones(list_thermal_zones())
        return Status.UNKNOWN
    selected = None if opts.zone is None else _zone_number(opts.zone)
    thresholds = set_thresholds(opts.warning, opts.critical)

    zone = select_zone(list_thermal_zones(), selected)
    value, scale = real_temperature(zone.temperature, opts.unit)
    status = get_status(value, thresholds)

    line = (f"{_PROGRAM_SHORT} {state_text(status)} - +{value:.1f}{scale} "
            f"(thermal zone: {zone.number} [{zone.device}], "
            f"type: \"{zone.type or 'n/a'}\") | temp={int(value)}{opts.unit.value}")
    critical = int(zone.critical / 1000)
    if critical > 0 and selected is not None:
        line += f";0;{critical}"
    print(line)
    return status


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the temperature check and return its exit code."""
    return run_plugin(_run, argv)