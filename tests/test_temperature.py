import pytest

from linuxprobes.plugin import PluginError, Status
from linuxprobes.temperature import (
    TempUnit,
    ThermalZone,
    list_thermal_zones,
    main,
    real_temperature,
    select_zone,
    thermal_sysfs_path,
)


def _zone(root, number, temp, kind="acpitz", critical=None):
    zone = root / f"thermal_zone{number}"
    zone.mkdir()
    (zone / "temp").write_text(f"{temp}\n")
    (zone / "type").write_text(f"{kind}\n")
    if critical is not None:
        (zone / "trip_point_0_type").write_text("critical\n")
        (zone / "trip_point_0_temp").write_text(f"{critical}\n")
    return zone


@pytest.fixture
def tree(tmp_path, monkeypatch):
    _zone(tmp_path, 0, 40000, "acpitz", critical=98000)
    _zone(tmp_path, 1, 55000, "x86_pkg_temp")
    (tmp_path / "cooling_device0").mkdir()
    monkeypatch.setenv("NPL_TESTING_PATH_SYS_THERMAL", str(tmp_path))
    return tmp_path


def test_real_temperature_celsius():
    assert real_temperature(45000, TempUnit.CELSIUS) == (45.0, "°C")


def test_real_temperature_fahrenheit_and_kelvin():
    assert real_temperature(0, TempUnit.FAHRENHEIT) == (32.0, "°F")
    value, scale = real_temperature(0, TempUnit.KELVIN)
    assert scale == "°K"
    assert value == pytest.approx(273.1)


def test_sysfs_path_override(tree):
    assert thermal_sysfs_path() == str(tree)


def test_list_zones(tree):
    zones = list_thermal_zones()
    assert [z.number for z in zones] == [0, 1]
    assert zones[0].critical == 98000
    assert zones[1].critical == 0
    assert zones[1].type == "x86_pkg_temp"


def test_list_zones_missing_root(tmp_path):
    with pytest.raises(PluginError):
        list_thermal_zones(str(tmp_path / "absent"))


def test_select_hottest_and_specific():
    zones = [ThermalZone(0, 40000), ThermalZone(1, 55000)]
    assert select_zone(zones).number == 1
    assert select_zone(zones, 0).number == 0
    with pytest.raises(PluginError):
        select_zone(zones, 7)
    with pytest.raises(PluginError):
        select_zone([])


def test_main_default(tree, capsys):
    assert main([]) == Status.OK
    out = capsys.readouterr().out.strip()
    assert out.startswith("temperature OK - +55.0°C (thermal zone: 1")
    assert out.endswith("| temp=55C")


def test_main_selected_zone_has_critical(tree, capsys):
    assert main(["-t", "0", "-w", "30", "-c", "50"]) == Status.WARNING
    out = capsys.readouterr().out.strip()
    assert 'type: "acpitz"' in out
    assert out.endswith("temp=40C;0;98")


def test_main_fahrenheit(tree, capsys):
    main(["-f", "-t", "1"])
    out = capsys.readouterr().out
    assert "°F" in out
    assert "temp=131F" in out


def test_main_bad_zone_argument(tree):
    assert main(["-t", "abc"]) == Status.UNKNOWN


def test_main_list(tree, capsys):
    assert main(["-l"]) == Status.UNKNOWN
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 2
    assert lines[0].startswith("thermal_zone0:")