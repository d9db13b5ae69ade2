"""Tests for the candidate size generator."""

from __future__ import annotations

import unittest

from polyplan.pipeline.land import PlanningConfig
from polyplan.pipeline.placer import CandidateSize, generate_candidate_sizes
from polyplan.pipeline.placer.sizes import sizes_at_least


class TestCandidateSizes(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.config = PlanningConfig()
        cls.sizes = generate_candidate_sizes(cls.config)

    def test_not_empty(self):
        self.assertGreater(len(self.sizes), 0)

    def test_module_multiples(self):
        for s in self.sizes:
            self.assertAlmostEqual(s.gable / 8.0, round(s.gable / 8.0))
            self.assertAlmostEqual(s.gutter / 4.0, round(s.gutter / 4.0))

    def test_limits(self):
        for s in self.sizes:
            self.assertLessEqual(s.gable, 120.0)
            self.assertLessEqual(s.gutter, 120.0)
            self.assertLessEqual(s.area, 10_000.0)
            self.assertGreaterEqual(max(s.gable, s.gutter), 8.0)

    def test_sorted_largest_first(self):
        areas = [s.area for s in self.sizes]
        self.assertEqual(areas, sorted(areas, reverse=True))

    def test_largest_hits_area_cap(self):
        self.assertEqual(self.sizes[0].area, 9_984.0)

    def test_small_modules_exact_set(self):
        config = PlanningConfig(block_width=10, block_height=5, max_side_length=20,
                                min_side_length=8)
        sizes = generate_candidate_sizes(config)
        self.assertEqual(len(sizes), 8)
        self.assertEqual(sizes[0], CandidateSize(20.0, 20.0))
        self.assertEqual(sizes[-1], CandidateSize(10.0, 5.0))

    def test_min_side_applies_to_longer_side(self):
        config = PlanningConfig(min_side_length=40, max_side_length=48)
        for s in generate_candidate_sizes(config):
            self.assertGreaterEqual(max(s.gable, s.gutter), 40.0)

    def test_min_blocks(self):
        config = PlanningConfig(max_side_length=32, min_blocks_per_structure=6)
        sizes = generate_candidate_sizes(config)
        self.assertTrue(sizes)
        for s in sizes:
            self.assertGreaterEqual(round(s.gable / 8) * round(s.gutter / 4), 6)

    def test_area_cap(self):
        config = PlanningConfig(max_structure_area=100)
        for s in generate_candidate_sizes(config):
            self.assertLessEqual(s.area, 100.0)

    def test_nothing_fits(self):
        config = PlanningConfig(block_width=50, max_side_length=40)
        self.assertEqual(generate_candidate_sizes(config), [])

    def test_long_sides_bounded_by_area(self):
        config = PlanningConfig(max_side_length=20_000)
        sizes = generate_candidate_sizes(config)
        self.assertEqual(len(sizes), len({(s.gable, s.gutter) for s in sizes}))
        for s in sizes:
            self.assertLessEqual(s.area, 10_000.0)
            self.assertLessEqual(s.gable, 10_000.0 / 4.0)

    def test_matches_full_enumeration(self):
        for config in (PlanningConfig(),
                       PlanningConfig(max_side_length=400, max_structure_area=2_000),
                       PlanningConfig(block_width=6, block_height=3, min_side_length=30)):
            expected = set()
            for i in range(1, int(config.max_side_length / config.block_width) + 1):
                for j in range(1, int(config.max_side_length / config.block_height) + 1):
                    g, w = i * config.block_width, j * config.block_height
                    if g * w <= config.max_structure_area and max(g, w) >= config.min_side_length:
                        expected.add((g, w))
            got = {(s.gable, s.gutter) for s in generate_candidate_sizes(config)}
            self.assertEqual(got, expected)

    def test_sizes_at_least(self):
        floor = self.sizes[0].area * 0.7
        large = sizes_at_least(self.sizes, floor)
        self.assertTrue(large)
        self.assertTrue(all(s.area >= floor for s in large))
        self.assertEqual(large, self.sizes[:len(large)])


if __name__ == "__main__":
    unittest.main()
