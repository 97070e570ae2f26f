from __future__ import annotations

import math
import unittest

from iconkit_core.path_data import PathDataError, parse_numbers, parse_path


def _segment_distance(px: float, py: float, a: tuple[float, float], b: tuple[float, float]) -> float:
    dx = b[0] - a[0]
    dy = b[1] - a[1]
    length_sq = dx * dx + dy * dy
    t = 0.0 if length_sq == 0 else max(0.0, min(1.0, ((px - a[0]) * dx + (py - a[1]) * dy) / length_sq))
    return math.hypot(px - (a[0] + t * dx), py - (a[1] + t * dy))


class PathDataTests(unittest.TestCase):
    def test_absolute_and_relative_lines(self) -> None:
        (sub,) = parse_path("M5 12h14")
        self.assertEqual(sub.points, [(5.0, 12.0), (19.0, 12.0)])
        self.assertFalse(sub.closed)

        (sub,) = parse_path("m12 5 7 7-7 7")
        self.assertEqual(sub.points, [(12.0, 5.0), (19.0, 12.0), (12.0, 19.0)])

    def test_compact_number_syntax(self) -> None:
        (sub,) = parse_path("M.5.5L1-2")
        self.assertEqual(sub.points, [(0.5, 0.5), (1.0, -2.0)])

    def test_close_returns_to_start(self) -> None:
        (sub,) = parse_path("M0 0H4V4Z")
        self.assertTrue(sub.closed)
        self.assertEqual(sub.points[0], sub.points[-1])

    def test_multiple_subpaths(self) -> None:
        subs = parse_path("M0 0h1M5 5v1")
        self.assertEqual(len(subs), 2)
        self.assertEqual(subs[1].points, [(5.0, 5.0), (5.0, 6.0)])

    def test_arc_lies_on_circle(self) -> None:
        (sub,) = parse_path("M3 12A9 9 0 0 0 21 12")
        self.assertEqual(sub.points[-1], (21.0, 12.0))
        self.assertGreater(len(sub.points), 4)
        for x, y in sub.points:
            self.assertAlmostEqual(math.hypot(x - 12, y - 12), 9.0, places=6)

    def test_packed_arc_flags(self) -> None:
        (sub,) = parse_path("M0 0a1 1 0 011 1")
        self.assertAlmostEqual(sub.points[-1][0], 1.0)
        self.assertAlmostEqual(sub.points[-1][1], 1.0)

    def test_curves_end_on_their_endpoints(self) -> None:
        (sub,) = parse_path("M0 0C0 10 10 10 10 0S20 -10 20 0Q25 5 30 0T40 0")
        self.assertEqual(sub.points[-1], (40.0, 0.0))
        self.assertIn((10.0, 0.0), sub.points)
        self.assertIn((20.0, 0.0), sub.points)

    def test_flattening_is_deterministic(self) -> None:
        d = "M19 14c1.49-1.46 3-3.21 3-5.5A5.5 5.5 0 0 0 16.5 3c-1.76 0-3 .5-4.5 2Z"
        self.assertEqual(parse_path(d), parse_path(d))

    def test_arc_chords_stay_within_pixel_tolerance(self) -> None:
        d = "M3 12A9 9 0 0 0 21 12"
        scale = 1024 / 24
        (coarse,) = parse_path(d)
        (fine,) = parse_path(d, scale=scale)
        self.assertGreater(len(fine.points), len(coarse.points))
        for (ax, ay), (bx, by) in zip(fine.points, fine.points[1:]):
            mid_radius = math.hypot((ax + bx) / 2 - 12, (ay + by) / 2 - 12)
            self.assertLessEqual((9.0 - mid_radius) * scale, 0.1 + 1e-9)

    def test_cubic_chords_stay_within_pixel_tolerance(self) -> None:
        scale = 40.0
        (sub,) = parse_path("M0 0C0 10 10 10 10 0", scale=scale)
        segments = list(zip(sub.points, sub.points[1:]))
        worst = 0.0
        for i in range(801):
            t = i / 800
            mt = 1 - t
            px = 3 * mt * t * t * 10 + t * t * t * 10
            py = 3 * mt * mt * t * 10 + 3 * mt * t * t * 10
            worst = max(worst, min(_segment_distance(px, py, a, b) for a, b in segments))
        self.assertLessEqual(worst * scale, 0.1 + 1e-9)

    def test_flattening_rejects_non_positive_scale(self) -> None:
        with self.assertRaises(ValueError):
            parse_path("M0 0h1", scale=0)

    def test_number_lists(self) -> None:
        self.assertEqual(parse_numbers("0 0,24 24"), [0.0, 0.0, 24.0, 24.0])
        self.assertEqual(parse_numbers("1-2.5.5"), [1.0, -2.5, 0.5])
        self.assertEqual(parse_numbers(None), [])
        with self.assertRaises(PathDataError):
            parse_numbers("1 x")

    def test_malformed_data_raises(self) -> None:
        with self.assertRaises(PathDataError):
            parse_path("5 5")
        with self.assertRaises(PathDataError):
            parse_path("M1")
        with self.assertRaises(PathDataError):
            parse_path("M0 0A1 1 0 2 1 3 3")


if __name__ == "__main__":
    unittest.main()
