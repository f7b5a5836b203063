"""Tests for the series data model."""

from __future__ import annotations

import numpy as np
import pytest

from radar_graphs.models import Bounds, Point, SchemaMap, Series


def test_from_pairs_drops_non_finite_and_truncates() -> None:
    s = Series.from_pairs("s", [0, 1, 2, 3], [1.0, np.nan, np.inf, 4.0, 5.0])
    assert list(s.points()) == [Point(0.0, 1.0), Point(3.0, 4.0)]
    assert len(s) == 2
    assert s.x.dtype == np.float64


def test_series_rejects_non_finite() -> None:
    with pytest.raises(ValueError):
        Series("bad", np.array([0.0, 1.0]), np.array([0.0, np.nan]))


def test_series_rejects_length_mismatch() -> None:
    with pytest.raises(ValueError):
        Series("bad", np.array([0.0, 1.0]), np.array([0.0]))


def test_bounds_defaults_and_spans() -> None:
    b = Bounds()
    assert (b.min_x, b.max_x, b.min_y, b.max_y) == (0.0, 1.0, 0.0, 1.0)
    assert Bounds(-1.0, 3.0, 2.0, 7.0).span_x == 4.0
    assert Bounds(-1.0, 3.0, 2.0, 7.0).span_y == 5.0


def test_schema_map_defaults() -> None:
    m = SchemaMap()
    assert m.x_index is None
    assert m.time_scale_to_seconds == 1.0
    assert m.y_indices == []
