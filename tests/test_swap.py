import time

import pytest

from linuxprobes.plugin import Status
from linuxprobes.procfs import MemInfo
from linuxprobes.swap import format_swap, main, swap_percent_used
from linuxprobes.units import UnitShift

QUARTER = MemInfo(swap_total=1000, swap_used=250, swap_free=750, swap_cached=10)

MEMINFO_TEXT = (
    "MemTotal:        2000 kB\n"
    "MemFree:         1000 kB\n"
    "SwapCached:        10 kB\n"
    "SwapTotal:       1000 kB\n"
    "SwapFree:         750 kB\n"
)

VMSTAT_TEXT = "pswpin 4\npswpout 6\n"


def test_percent_used():
    assert swap_percent_used(QUARTER) == 25.0


def test_percent_used_without_swap_is_zero():
    assert swap_percent_used(MemInfo()) == 0.0


def test_percent_used_bounds():
    full = MemInfo(swap_total=512, swap_used=512)
    assert swap_percent_used(full) == 100.0


def test_format_in_kilobytes():
    text = format_swap(QUARTER, Status.OK)
    assert text.startswith("OK: 25.00% (250 kB) used | ")
    assert "swap_total=1000kB swap_used=250kB swap_free=750kB swap_cached=10kB" in text
    assert "swap_pageins" not in text


def test_format_in_bytes():
    text = format_swap(QUARTER, Status.WARNING, UnitShift.B)
    assert text.startswith("WARNING:")
    assert "swap_total=1024000B" in text


def test_format_with_vmem_delta():
    text = format_swap(QUARTER, Status.OK, UnitShift.K, (3, 9))
    assert text.endswith(", swap_pageins/s=3 swap_pageouts/s=9")


@pytest.fixture
def proc_files(tmp_path, monkeypatch):
    meminfo = tmp_path / "meminfo"
    meminfo.write_text(MEMINFO_TEXT)
    vmstat = tmp_path / "vmstat"
    vmstat.write_text(VMSTAT_TEXT)
    monkeypatch.setenv("NPL_TESTING_PATH_PROC_MEMINFO", str(meminfo))
    monkeypatch.setenv("NPL_TESTING_PATH_PROC_VMSTAT", str(vmstat))
    monkeypatch.setattr(time, "sleep", lambda seconds: None)


def test_main_ok(proc_files, capsys):
    code = main(["-w", "50%", "-c", "80%"])
    out = capsys.readouterr().out
    assert code == Status.OK
    assert out.startswith("swap OK:")
    assert "swap_total=1000kB" in out


def test_main_warning(proc_files, capsys):
    assert main(["-w", "10%", "-c", "80%"]) == Status.WARNING


def test_main_vmstats(proc_files, capsys):
    code = main(["--vmstats", "-m", "-w", "50%"])
    out = capsys.readouterr().out
    assert code == Status.OK
    assert "swap_pageins/s=0 swap_pageouts/s=0" in out
    assert "MB" in out


def test_main_rejects_non_percent_thresholds(proc_files, capsys):
    assert main(["-w", "50", "-c", "80%"]) == Status.UNKNOWN
    assert capsys.readouterr().out == ""


def test_main_rejects_unknown_option(proc_files, capsys):
    assert main(["--bogus"]) == Status.UNKNOWN