import pytest

from linuxprobes.plugin import Status, UsageError
from linuxprobes.thresholds import (
    RangeParseError,
    Thresholds,
    get_status,
    parse_range,
    set_thresholds,
    thresholds_expressed_as_percentages,
)


def test_plain_end_means_zero_to_end():
    rng = parse_range("10")
    assert rng.start == 0
    assert rng.end == 10
    assert not rng.alerts(10)
    assert not rng.alerts(0)
    assert rng.alerts(11)
    assert rng.alerts(-1)


def test_open_end():
    rng = parse_range("10:")
    assert rng.end_infinity
    assert rng.alerts(9)
    assert not rng.alerts(10)
    assert not rng.alerts(1e12)


def test_negative_infinity_start():
    rng = parse_range("~:10")
    assert rng.start_infinity
    assert not rng.alerts(-1e9)
    assert rng.alerts(11)


def test_bounded_range():
    rng = parse_range("10:20")
    assert not rng.alerts(15)
    assert rng.alerts(9)
    assert rng.alerts(21)


def test_inside_range_inverts():
    rng = parse_range("@10:20")
    assert rng.alert_inside
    assert rng.alerts(15)
    assert not rng.alerts(25)


def test_percent_suffix_is_accepted():
    rng = parse_range("80%")
    assert rng.end == 80
    assert rng.alerts(81)


@pytest.mark.parametrize("text", ["20:10", "abc", "", "1_0", "5:x"])
def test_unparseable_ranges(text):
    with pytest.raises(RangeParseError):
        parse_range(text)


def test_range_error_is_usage_error():
    with pytest.raises(UsageError):
        set_thresholds("x", None)


def test_get_status_levels():
    th = set_thresholds("10", "20")
    assert get_status(5, th) == Status.OK
    assert get_status(15, th) == Status.WARNING
    assert get_status(25, th) == Status.CRITICAL


def test_get_status_without_thresholds():
    assert get_status(1e9, set_thresholds(None, None)) == Status.OK
    assert get_status(1e9, None) == Status.OK
    assert set_thresholds(None, None) == Thresholds()


def test_minimum_thresholds():
    th = set_thresholds("30:", "15:")
    assert get_status(40, th) == Status.OK
    assert get_status(20, th) == Status.WARNING
    assert get_status(10, th) == Status.CRITICAL


def test_percentage_detection():
    assert thresholds_expressed_as_percentages("80%", "90%")
    assert not thresholds_expressed_as_percentages("80", "90%")
    assert not thresholds_expressed_as_percentages("80%", "90")
    assert thresholds_expressed_as_percentages(None, None)
    assert thresholds_expressed_as_percentages(None, "90%")