import sys
from pathlib import Path

import pytest

from linuxprobes.netinfo import SYSFS_NET_ENV
from linuxprobes.network import (
    NetworkCheck,
    check_for_program,
    format_perfdata_bytes,
    main,
    ratio_over_speed,
    threshold_metric,
)
from linuxprobes.plugin import PluginError


def make_iface(root: Path, name, flags="0x1003", operstate="up",
               speed="1000", duplex="full"):
    path = root / name
    (path / "statistics").mkdir(parents=True)
    (path / "flags").write_text(flags + "\n")
    (path / "operstate").write_text(operstate + "\n")
    (path / "speed").write_text(speed + "\n")
    (path / "duplex").write_text(duplex + "\n")
    for key in ("tx_bytes", "rx_bytes", "tx_errors", "rx_errors"):
        (path / "statistics" / key).write_text("42\n")
    return path


@pytest.fixture
def plugin_env(tmp_path, monkeypatch):
    make_iface(tmp_path, "eth0")
    make_iface(tmp_path, "lo", flags="0x9", operstate="unknown", speed="-1",
               duplex="unknown")
    monkeypatch.setenv(SYSFS_NET_ENV, str(tmp_path))
    monkeypatch.setattr(sys, "argv", ["/usr/lib/plugins/check_network"])
    monkeypatch.setattr("time.sleep", lambda seconds: None)
    return tmp_path


def test_threshold_metric():
    assert threshold_metric(3, 5) == 3 + 5
    assert threshold_metric(3, 5, tx_only=True) == 3
    assert threshold_metric(3, 5, rx_only=True) == 5


def test_ratio_over_speed():
    assert ratio_over_speed(50, 100) == pytest.approx(50.0)
    assert ratio_over_speed(0, 1000) == 0.0
    assert ratio_over_speed(250, 1000) * 1000 / 100 == pytest.approx(250)


def test_format_perfdata_bytes():
    assert format_perfdata_bytes("eth0", "txbyte", 100, 0) == "eth0_txbyte/s=100"
    assert (format_perfdata_bytes("eth0", "txbyte", 100, 1000)
            == "eth0_txbyte/s=100;;;0;1000")
    assert (format_perfdata_bytes("eth0", "rxbyte", 500, 1000, True)
            == "eth0_rxbyte/s=50.00%;;;0;100.0")
    assert (format_perfdata_bytes("eth0", "rxbyte", 500, 0, True)
            == "eth0_rxbyte/s=500")


@pytest.mark.parametrize("name, check, display", [
    ("check_network", NetworkCheck.BYTES, "network"),
    ("check_network_collisions", NetworkCheck.COLLISIONS, "network collisions"),
    ("check_network_dropped", NetworkCheck.DROPPED, "network dropped"),
    ("/usr/lib/check_network_errors", NetworkCheck.ERRORS, "network errors"),
    ("check_network_multicast", NetworkCheck.MULTICAST, "network multicast"),
])
def test_check_for_program(name, check, display):
    assert check_for_program(name) == (check, display)


@pytest.mark.parametrize("name", ["network", "check_", "pytest"])
def test_check_for_program_bad_name(name):
    with pytest.raises(PluginError):
        check_for_program(name)


def test_main_reports_interfaces(plugin_env, capsys):
    assert main([]) == 0
    out = capsys.readouterr().out
    assert out.startswith("network OK - found 2 interface(s): eth0,lo | ")
    assert "eth0_txerr/s=0 eth0_rxerr/s=0" in out
    assert "lo_txbyte/s=0 " in out


def test_main_no_loopback(plugin_env, capsys):
    assert main(["--no-loopback"]) == 0
    assert "found 1 interface(s): eth0 |" in capsys.readouterr().out


def test_main_critical(plugin_env, capsys):
    assert main(["-c", "@0", "--ifname", "^eth"]) == 2
    assert capsys.readouterr().out.startswith("network CRITICAL")


def test_main_no_interfaces_is_unknown(plugin_env, capsys):
    assert main(["--ifname", "^nothing"]) == 3
    assert "found 0 interface(s)" in capsys.readouterr().out


def test_main_rx_and_tx_only(plugin_env):
    assert main(["--rx-only", "--tx-only"]) == 3


def test_main_debug_rejects_delay(plugin_env):
    assert main(["--ifname-debug", "5"]) == 3


def test_main_debug_lists_keys(plugin_env, capsys):
    assert main(["--ifname-debug", "-C"]) == 3
    out = capsys.readouterr().out
    assert "eth0: eth0_txbyte/s eth0_rxbyte/s" in out
    assert "coll" not in out


def test_main_perc_without_speed(plugin_env, capsys):
    assert main(["--perc", "-w", "80"]) == 3
    assert "cannot be converted into percentages" in capsys.readouterr().err


def test_main_bad_delay(plugin_env):
    assert main(["0"]) == 3


def test_main_disabled_counter_for_check(plugin_env, monkeypatch):
    monkeypatch.setattr(sys, "argv", ["check_network_errors"])
    assert main(["--no-errors"]) == 3