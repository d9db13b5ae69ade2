"""Tests for the solar orientation solver.

Validates:
  - Equator band: every 10° step is allowed (18 angles)
  - Poles and high latitudes: gable strictly north-south
  - Mid latitudes: the range comes from cos A = sin 23.5° / cos lat
  - Strategies, overrides and the solar switch
"""

from __future__ import annotations

import math
import unittest

from polyplan.pipeline.land import OrientationStrategy, PlanningInputError
from polyplan.pipeline.placer import allowed_deviation, solve_orientations


class TestAllowedDeviation(unittest.TestCase):

    def test_equator(self):
        self.assertEqual(allowed_deviation(0.0), 90.0)
        self.assertEqual(allowed_deviation(0.5), 90.0)
        self.assertEqual(allowed_deviation(-0.9), 90.0)

    def test_mid_latitude(self):
        expected = math.degrees(math.acos(
            math.sin(math.radians(23.5)) / math.cos(math.radians(12.97))))
        self.assertAlmostEqual(allowed_deviation(12.97), expected)
        self.assertAlmostEqual(allowed_deviation(-12.97), expected)

    def test_high_latitude_is_polar(self):
        self.assertEqual(allowed_deviation(70.0), 0.0)
        self.assertEqual(allowed_deviation(90.0), 0.0)
        self.assertEqual(allowed_deviation(-90.0), 0.0)

    def test_out_of_range(self):
        with self.assertRaises(PlanningInputError):
            allowed_deviation(91.0)


class TestSolveOrientations(unittest.TestCase):

    def test_equator_full_sweep(self):
        angles = solve_orientations(0.0)
        self.assertEqual(len(angles), 18)
        self.assertEqual(angles, [float(a) for a in range(0, 180, 10)])

    def test_poles(self):
        self.assertEqual(solve_orientations(90.0), [90.0])
        self.assertEqual(solve_orientations(-90.0), [90.0])

    def test_optimized_mid_latitude(self):
        dev = allowed_deviation(12.97)
        angles = solve_orientations(12.97, OrientationStrategy.OPTIMIZED)
        self.assertIn(90.0, angles)
        self.assertEqual(angles, sorted(angles))
        self.assertIn(round(90.0 - dev, 2), angles)
        self.assertIn(round(90.0 + dev, 2), angles)
        for a in angles:
            self.assertGreaterEqual(a, 90.0 - dev - 0.01)
            self.assertLessEqual(a, 90.0 + dev + 0.01)
        # 30..150 in 10° steps plus the two boundaries
        self.assertEqual(len(angles), 15)

    def test_uniform(self):
        self.assertEqual(solve_orientations(12.97, OrientationStrategy.UNIFORM), [90.0])

    def test_varied(self):
        dev = allowed_deviation(12.97)
        angles = solve_orientations(12.97, OrientationStrategy.VARIED)
        self.assertEqual(angles, [round(90.0 - dev, 2), 90.0])

    def test_varied_narrow_range_uses_upper_boundary(self):
        angles = solve_orientations(12.97, OrientationStrategy.VARIED,
                                    deviation_override=4.0)
        self.assertEqual(angles, [90.0, 94.0])

    def test_deviation_override(self):
        angles = solve_orientations(45.0, deviation_override=20.0)
        self.assertEqual(angles, [70.0, 80.0, 90.0, 100.0, 110.0])

    def test_solar_disabled(self):
        angles = solve_orientations(60.0, solar_enabled=False)
        self.assertEqual(angles, [float(a) for a in range(0, 180, 10)])

    def test_deterministic(self):
        self.assertEqual(solve_orientations(33.3), solve_orientations(33.3))

    def test_latitude_out_of_range(self):
        with self.assertRaises(PlanningInputError):
            solve_orientations(-91.0)


if __name__ == "__main__":
    unittest.main()
