import unittest
import tempfile
from pathlib import Path

import numpy as np

from radar_graphs.analysis.coords import map_x
from radar_graphs.chart.session import ChartSession, PlotLayout
from radar_graphs.ingest.errors import IngestError
from radar_graphs.models.series import Bounds


RADAR_CSV = "time_ms,radar_voltage,radar_adc\n0,1.0,100\n10,1.5,110\n20,2.0,120\n"
PEAK_CSV = "time,voltage\n0,0\n1,1\n2,5\n3,1\n4,0\n"


class _TmpFiles(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def write(self, name: str, text: str) -> Path:
        p = self.dir / name
        p.write_text(text, encoding="utf-8")
        return p


class TestChartSessionLoading(_TmpFiles):
    def test_initial_state(self):
        s = ChartSession()
        self.assertFalse(s.has_data)
        self.assertEqual(s.bounds, Bounds())
        self.assertEqual((s.x_title, s.y_title), ("X", "Y"))

    def test_radar_file_end_to_end(self):
        s = ChartSession()
        res = s.load_file(self.write("radar.csv", RADAR_CSV))
        self.assertEqual(res.series_added, 2)
        self.assertTrue(res.header_driven)
        self.assertEqual(len(s.series), 2)
        np.testing.assert_allclose(s.series[0].x, [0.0, 0.01, 0.02])
        self.assertEqual(s.x_title, "Time [s]")
        self.assertEqual(s.y_title, "Voltage/ADC")
        # Bounds refitted with padding.
        self.assertLess(s.bounds.min_x, 0.0)
        self.assertGreater(s.bounds.max_y, 120.0)

    def test_headerless_file_uses_fallback_titles(self):
        s = ChartSession()
        res = s.load_file(self.write("plain.csv", "0,5\n1,7\n2,3\n"))
        self.assertEqual(res.series_added, 1)
        self.assertFalse(res.header_driven)
        self.assertEqual(s.series[0].name, "plain")
        self.assertEqual((s.x_title, s.y_title), ("Sample", "Value"))

    def test_blank_file_leaves_session_unchanged(self):
        s = ChartSession()
        s.load_file(self.write("radar.csv", RADAR_CSV))
        before = (s.series, s.bounds, s.x_title, s.y_title)
        with self.assertRaises(IngestError):
            s.load_file(self.write("blank.csv", "\n   \n\n"))
        self.assertEqual(len(s.series), 2)
        self.assertEqual((s.series, s.bounds, s.x_title, s.y_title), before)

    def test_load_files_collects_errors_and_continues(self):
        s = ChartSession()
        res = s.load_files([
            self.write("blank.csv", ""),
            self.write("radar.csv", RADAR_CSV),
            self.dir / "missing.csv",
        ])
        self.assertEqual(len(res.loaded), 1)
        self.assertEqual(len(res.errors), 2)
        self.assertEqual(res.total_series, 2)
        self.assertEqual(res.series_added, 2)

    def test_title_mismatch_falls_back_to_generic(self):
        s = ChartSession()
        s.load_file(self.write("radar.csv", RADAR_CSV))
        res = s.load_file(self.write("speed.csv", "time,speed\n0,1\n1,2\n"))
        self.assertEqual((s.x_title, s.y_title), ("Time [s]", "Value"))
        self.assertTrue(any("axis titles differ" in w for w in res.warnings))

    def test_series_keep_load_order(self):
        s = ChartSession()
        s.load_file(self.write("a.csv", "0,1\n1,2\n"))
        s.load_file(self.write("b.csv", "0,3\n1,4\n"))
        self.assertEqual([x.name for x in s.series], ["a", "b"])

    def test_clear_resets_everything(self):
        s = ChartSession()
        s.load_file(self.write("radar.csv", RADAR_CSV))
        s.clear()
        self.assertFalse(s.has_data)
        self.assertEqual(s.bounds, Bounds())
        self.assertEqual((s.x_title, s.y_title), ("X", "Y"))
        self.assertTrue(s.to_frame().empty)


class TestChartSessionQueries(_TmpFiles):
    def setUp(self):
        super().setUp()
        self.session = ChartSession(layout=PlotLayout())
        self.session.load_file(self.write("peak.csv", PEAK_CSV))
        self.rect = self.session.layout.plot_rect(500, 400)

    def _px(self, x: float) -> float:
        b = self.session.bounds
        return map_x(x, self.rect, b.min_x, b.max_x)

    def test_peak_indices_cached(self):
        first = self.session.peak_indices(0)
        self.assertEqual(first, [2])
        self.assertIs(self.session.peak_indices(0), first)

    def test_interpolate(self):
        self.assertAlmostEqual(self.session.interpolate(0, 1.5), 3.0)
        self.assertAlmostEqual(self.session.interpolate(0, -10.0), 0.0)

    def test_hover_snaps_to_nearby_peak(self):
        py = self.rect.top + self.rect.height / 2
        hov = self.session.hover(self._px(2.05), py, self.rect)
        self.assertIsNotNone(hov)
        self.assertTrue(hov.snapped)
        self.assertEqual(hov.data_x, 2.0)
        self.assertAlmostEqual(hov.values[0].y, 5.0)
        self.assertEqual(
            hov.text_lines(self.session.x_title),
            ["Time [s]: 2  (snap)", "★ peak - voltage: 5"],
        )

    def test_hover_without_snap_interpolates(self):
        py = self.rect.top + self.rect.height / 2
        hov = self.session.hover(self._px(0.5), py, self.rect)
        self.assertFalse(hov.snapped)
        self.assertAlmostEqual(hov.data_x, 0.5)
        self.assertAlmostEqual(hov.values[0].y, 0.5)

    def test_hover_outside_plot_is_none(self):
        self.assertIsNone(self.session.hover(self.rect.left - 5, self.rect.top + 5, self.rect))

    def test_snap_global_across_series(self):
        self.session.load_file(self.write("tall.csv", "time,voltage\n0,0\n2.02,9\n4,0\n"))
        hit = self.session.snap(2.01, self.rect.width)
        self.assertIsNotNone(hit)
        self.assertEqual(hit.series_index, 1)
        self.assertEqual(hit.y, 9.0)

    def test_pie_and_summary(self):
        items = self.session.pie_items()
        self.assertEqual(len(items), 1)
        self.assertAlmostEqual(items[0].value, 7.0)
        df = self.session.area_summary()
        self.assertEqual(df["name"].tolist(), ["peak - voltage"])

    def test_to_frame_long_format(self):
        df = self.session.to_frame()
        self.assertEqual(list(df.columns), ["series", "x", "y"])
        self.assertEqual(len(df), 5)
        self.assertEqual(set(df["series"]), {"peak - voltage"})


if __name__ == "__main__":
    unittest.main()
