import pytest

from linuxprobes.plugin import PluginError
from linuxprobes.uptime import format_uptime, main, read_uptime


def test_zero_uptime():
    assert format_uptime(0) == "0 min"


def test_one_day_exactly():
    assert format_uptime(86400) == "1 day 0 min"


def test_days_hours_minutes():
    assert format_uptime(2 * 86400 + 3600 + 5 * 60) == "2 days 1 hour 5 min"


def test_no_day_part_below_one_day():
    assert "day" not in format_uptime(86399)


@pytest.mark.parametrize("days", [2, 3, 10])
def test_plural_days(days):
    assert format_uptime(days * 86400).startswith(f"{days} days ")


def test_fractional_seconds_are_truncated():
    assert format_uptime(59.9) == format_uptime(0)


def test_hours_plural():
    assert "hours" in format_uptime(3 * 3600)


def test_read_uptime_from_file(tmp_path):
    path = tmp_path / "uptime"
    path.write_text("7200.55 12345.67\n")
    assert read_uptime(str(path)) == pytest.approx(7200.55)


def test_read_uptime_missing_file(tmp_path):
    with pytest.raises(PluginError):
        read_uptime(str(tmp_path / "absent"))


def test_read_uptime_malformed(tmp_path):
    path = tmp_path / "uptime"
    path.write_text("garbage\n")
    with pytest.raises(PluginError):
        read_uptime(str(path))


def test_main_critical_when_below_range(tmp_path, monkeypatch, capsys):
    path = tmp_path / "uptime"
    path.write_text("7200.0 100.0\n")
    monkeypatch.setenv("NPL_TESTING_PATH_PROC_UPTIME", str(path))
    code = main(["-c", "200:"])
    out = capsys.readouterr().out
    assert code == 2
    assert "CRITICAL" in out
    assert ";;200:;0;" in out


def test_main_ok_without_thresholds(tmp_path, monkeypatch, capsys):
    path = tmp_path / "uptime"
    path.write_text("60.0 10.0\n")
    monkeypatch.setenv("NPL_TESTING_PATH_PROC_UPTIME", str(path))
    code = main([])
    out = capsys.readouterr().out
    assert code == 0
    assert out.startswith("uptime OK: ")


def test_main_bad_threshold_is_unknown(tmp_path, monkeypatch):
    path = tmp_path / "uptime"
    path.write_text("60.0 10.0\n")
    monkeypatch.setenv("NPL_TESTING_PATH_PROC_UPTIME", str(path))
    assert main(["-w", "abc"]) == 3