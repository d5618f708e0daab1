import pytest

from linuxprobes.plugin import PluginError, Status
from linuxprobes.pressure import PsiLine, main, parse_psi, read_psi

CPU_TEXT = "some avg10=1.50 avg60=2.25 avg300=0.75 total=0\n"

IO_FIRST = (
    "some avg10=0.10 avg60=0.20 avg300=0.30 total=0\n"
    "full avg10=0.01 avg60=0.02 avg300=0.03 total=0\n"
)
IO_SECOND = (
    "some avg10=0.40 avg60=0.50 avg300=0.60 total=4000\n"
    "full avg10=0.04 avg60=0.05 avg300=0.06 total=1500\n"
)


def test_parse_single_line():
    lines = parse_psi(CPU_TEXT)
    assert lines == {"some": PsiLine(1.50, 2.25, 0.75, 0)}


def test_parse_two_lines():
    lines = parse_psi(IO_SECOND)
    assert lines["some"].total == 4000
    assert lines["full"].avg300 == 0.06
    assert set(lines) == {"some", "full"}


def test_parse_ignores_unknown_lines():
    assert parse_psi("other avg10=1.0\n") == {}


def test_parse_rejects_malformed_line():
    with pytest.raises(PluginError):
        parse_psi("some avg10=abc avg60=0 avg300=0 total=1\n")


def test_read_psi_reports_stall_per_second(tmp_path):
    path = tmp_path / "io"
    path.write_text(IO_FIRST)
    delays = []

    def fake_sleep(seconds):
        delays.append(seconds)
        path.write_text(IO_SECOND)

    lines, starvation = read_psi(path, 1, fake_sleep)
    assert delays == [1]
    assert starvation == {"some": 4000, "full": 1500}
    assert lines == parse_psi(IO_SECOND)


def test_read_psi_unchanged_file_has_no_stall(tmp_path):
    path = tmp_path / "cpu"
    path.write_text(CPU_TEXT)
    _, starvation = read_psi(path, 2, lambda seconds: None)
    assert starvation == {"some": 0}


def test_read_psi_missing_file(tmp_path):
    with pytest.raises(PluginError):
        read_psi(tmp_path / "absent", 1, lambda seconds: None)


def test_read_psi_without_some_line(tmp_path):
    path = tmp_path / "cpu"
    path.write_text("nothing here\n")
    with pytest.raises(PluginError):
        read_psi(path, 1, lambda seconds: None)


def test_main_without_mode_is_unknown(capsys):
    assert main([]) == Status.UNKNOWN
    assert capsys.readouterr().out == ""


def test_main_cpu_with_full_is_unknown(capsys):
    assert main(["--cpu", "--full"]) == Status.UNKNOWN


def test_main_zero_delay_is_unknown(capsys):
    assert main(["--io", "0"]) == Status.UNKNOWN
    assert "delay must be positive integer" in capsys.readouterr().err


def test_main_too_large_delay_is_unknown(capsys):
    assert main(["--memory", "61"]) == Status.UNKNOWN
    assert "too large delay value" in capsys.readouterr().err


def test_main_bad_delay_is_unknown(capsys):
    assert main(["--memory", "soon"]) == Status.UNKNOWN
    assert "failed to parse argument" in capsys.readouterr().err


def test_main_bad_threshold_is_unknown(capsys):
    assert main(["--cpu", "-w", "x:y"]) == Status.UNKNOWN