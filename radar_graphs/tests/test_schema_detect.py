"""Tests for header-driven schema detection."""

from __future__ import annotations

import numpy as np
import pytest

from radar_graphs.ingest.schema_detect import (
    DateTimeLikely,
    Numeric,
    best_y_title,
    classify_x_column,
    detect_schema,
    elapsed_seconds,
    header_like,
    is_radar_header,
    prioritize_y,
    split_header_unit,
    time_scale_for_unit,
)


# -----------------------------------------------------------------------
# Header helpers
# -----------------------------------------------------------------------


def test_header_like_normalises_separators() -> None:
    assert header_like("Sample_Time", "sample time")
    assert header_like("RADAR-VOLTAGE", "radar voltage")
    assert not header_like("speed", "range", "distance")


def test_radar_headers() -> None:
    assert is_radar_header("radar_voltage")
    assert is_radar_header("Radar ADC")
    assert not is_radar_header("voltage")


@pytest.mark.parametrize(
    "header, expected",
    [
        ("Voltage [V]", ("Voltage", "V")),
        ("time_ms", ("time", "ms")),
        ("t_us", ("t", "us")),
        ("elapsed_s", ("elapsed", "s")),
        ("speed", ("speed", None)),
    ],
)
def test_split_header_unit(header, expected) -> None:
    assert split_header_unit(header) == expected


def test_time_scale_for_unit() -> None:
    assert time_scale_for_unit("ms", "time_ms") == pytest.approx(1e-3)
    assert time_scale_for_unit("us", "time [us]") == pytest.approx(1e-6)
    assert time_scale_for_unit("s", "time [s]") == 1.0
    assert time_scale_for_unit(None, "Time") == 1.0
    # Unknown unit: raw header text decides.
    assert time_scale_for_unit("msec", "Time msec") == pytest.approx(1e-3)


# -----------------------------------------------------------------------
# detect_schema
# -----------------------------------------------------------------------


def test_detect_schema_time_in_ms() -> None:
    smap = detect_schema(["time_ms", "speed", "range"])
    assert smap.x_index == 0
    assert smap.time_scale_to_seconds == pytest.approx(1e-3)
    assert smap.x_title == "Time [s]"
    # First non-empty priority group wins: speed before range.
    assert smap.y_indices == [1]


def test_detect_schema_voltage_group_first() -> None:
    smap = detect_schema(["Timestamp", "Speed", "Voltage [V]"])
    assert smap.x_index == 0
    assert smap.y_indices == [2]


def test_detect_schema_no_time_column() -> None:
    smap = detect_schema(["a", "b"])
    assert smap.x_index is None
    assert smap.y_indices == []


def test_prioritize_y_orders_by_score_and_caps() -> None:
    headers = ["time", "range", "speed", "voltage"]
    assert prioritize_y(headers, [1, 2, 3]) == [3, 2, 1]
    assert prioritize_y(headers, [1, 2, 3], cap=2) == [3, 2]


def test_prioritize_y_is_stable_for_equal_scores() -> None:
    headers = ["time", "foo", "bar", "baz"]
    assert prioritize_y(headers, [3, 1, 2]) == [3, 1, 2]


# -----------------------------------------------------------------------
# best_y_title
# -----------------------------------------------------------------------


def test_best_y_title_voltage_defaults_unit() -> None:
    assert best_y_title(["t", "Voltage"], [1]) == ("Voltage [V]", "V")


def test_best_y_title_keeps_bracket_unit() -> None:
    assert best_y_title(["t", "Speed [m/s]"], [1]) == ("Speed [m/s]", "m/s")


def test_best_y_title_plain_name() -> None:
    assert best_y_title(["t", "range"], [1]) == ("range", None)


def test_best_y_title_empty_is_value() -> None:
    assert best_y_title(["t"], []) == ("Value", None)


# -----------------------------------------------------------------------
# X column classification
# -----------------------------------------------------------------------


def test_classify_x_column_timestamps() -> None:
    rows = [
        ("Timestamp", "v"),
        ("2024-01-01 00:00:00", "1"),
        ("2024-01-01 00:00:01", "2"),
        ("2024-01-01 00:00:02", "3"),
    ]
    kind = classify_x_column(rows, 1, 0)
    assert isinstance(kind, DateTimeLikely)
    assert (kind.n_ok, kind.n_probed) == (3, 3)


def test_classify_x_column_numbers_are_numeric() -> None:
    rows = [("t", "v"), ("0", "1"), ("1", "2")]
    assert isinstance(classify_x_column(rows, 1, 0), Numeric)


def test_classify_x_column_half_rule() -> None:
    rows = [("2024-01-01 00:00:00",), ("x",), ("y",), ("2024-01-01 00:00:03",)]
    # 2 of 4 parse: at least half -> timestamps.
    assert isinstance(classify_x_column(rows, 0, 0), DateTimeLikely)
    # 1 of 5 parse: below 5 // 2.
    assert isinstance(classify_x_column(rows[:3] + [("z",), ("w",)], 0, 0), Numeric)


def test_elapsed_seconds_relative_to_first_parsed() -> None:
    rows = [
        ("bad",),
        ("2024-01-01 00:00:00",),
        ("2024-01-01 00:00:01.500",),
    ]
    out = elapsed_seconds(rows, 0, 0)
    assert np.isnan(out[0])
    np.testing.assert_allclose(out[1:], [0.0, 1.5])
