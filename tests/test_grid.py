"""Tests for the ground-truth grid."""

import unittest

import numpy as np

from sleuth.grid import (
    Cell, Content, Direction, Grid, GridConfig, Terrain, VOID_CELL,
    generate_world, make_blood_trail_case, make_gravel_case, make_open_field,
    manhattan, neighbors,
)


class TestDirection(unittest.TestCase):
    """Test neighbor directions."""

    def test_direction_deltas(self):
        self.assertEqual(Direction.UP.delta(), (-1, 0))
        self.assertEqual(Direction.DOWN.delta(), (1, 0))
        self.assertEqual(Direction.LEFT.delta(), (0, -1))
        self.assertEqual(Direction.RIGHT.delta(), (0, 1))

    def test_all_directions(self):
        self.assertEqual(Direction.all(), [
            Direction.UP, Direction.RIGHT, Direction.DOWN, Direction.LEFT,
        ])

    def test_manhattan(self):
        self.assertEqual(manhattan((0, 0), (2, 3)), 5)
        self.assertEqual(manhattan((4, 1), (4, 1)), 0)


class TestGrid(unittest.TestCase):
    """Test ground-truth queries and occupancy."""

    def setUp(self):
        self.grid = make_gravel_case()

    def test_home_holds_the_house(self):
        self.assertEqual(self.grid.content_at(0, 0), Content.HOUSE)
        self.assertEqual(self.grid.home, (0, 0))

    def test_cell_at(self):
        self.assertEqual(self.grid.cell_at((2, 2)),
                         Cell(Terrain.PRECIPICE, Content.NOTHING))
        self.assertEqual(self.grid.terrain_at(1, 2), Terrain.GRAVEL)
        self.assertEqual(self.grid.content_at(4, 2), Content.CORPSE)

    def test_out_of_range_returns_void(self):
        self.assertIs(self.grid.cell_at((-1, 0)), VOID_CELL)
        self.assertEqual(self.grid.terrain_at(5, 0), Terrain.UNKNOWN)
        self.assertEqual(self.grid.content_at(0, 9), Content.NOTHING)

    def test_occupancy(self):
        self.assertFalse(self.grid.is_occupied(1, 1))
        self.grid.set_occupied(1, 1, True)
        self.assertTrue(self.grid.is_occupied(1, 1))
        self.grid.set_occupied(1, 1, False)
        self.assertFalse(self.grid.is_occupied(1, 1))

    def test_occupancy_out_of_range_is_ignored(self):
        self.grid.set_occupied(-1, 7, True)
        self.assertFalse(self.grid.is_occupied(-1, 7))
        self.assertFalse(self.grid.occupied.any())

    def test_neighbors_in_direction_order(self):
        self.assertEqual(self.grid.neighbors((0, 0)), [(0, 1), (1, 0)])
        self.assertEqual(self.grid.neighbors((2, 2)),
                         [(1, 2), (2, 3), (3, 2), (2, 1)])

    def test_find(self):
        self.assertEqual(self.grid.find(Content.KNIFE), [(4, 0)])

    def test_unknown_ground_truth_rejected(self):
        with self.assertRaises(ValueError):
            Grid(GridConfig(rows=2, cols=2, terrain={(0, 1): Terrain.UNKNOWN}))
        with self.assertRaises(ValueError):
            Grid(GridConfig(rows=2, cols=2, contents={(0, 1): Content.UNKNOWN}))

    def test_out_of_range_override_rejected(self):
        with self.assertRaises(ValueError):
            Grid(GridConfig(rows=3, cols=3, terrain={(-1, 0): Terrain.GRAVEL}))
        with self.assertRaises(ValueError):
            Grid(GridConfig(rows=3, cols=3, contents={(0, 3): Content.BLOOD}))

    def test_neighbors_helper_matches_grid(self):
        self.assertEqual(neighbors((4, 4), 5, 5), self.grid.neighbors((4, 4)))
        self.assertEqual(neighbors((0, 0), 1, 1), [])

    def test_empty_grid_rejected(self):
        with self.assertRaises(ValueError):
            Grid(GridConfig(rows=0, cols=3))

    def test_render(self):
        rendered = self.grid.render(agents=[(0, 1)])
        self.assertIn("A", rendered)
        self.assertIn("#", rendered)
        self.assertIn("H", rendered)
        self.assertEqual(len(rendered.splitlines()), 5)


class TestPrebuiltCases(unittest.TestCase):
    """Test the fixed scenarios."""

    def test_open_field(self):
        grid = make_open_field()
        self.assertEqual(grid.shape, (3, 3))
        self.assertTrue((grid.terrain == Terrain.GRASS).all())

    def test_blood_trail(self):
        grid = make_blood_trail_case()
        self.assertEqual(grid.find(Content.CORPSE), [(3, 3)])
        self.assertEqual(len(grid.find(Content.BLOOD)), 4)


class TestGenerateWorld(unittest.TestCase):
    """Test random case generation."""

    def test_evidence_layout(self):
        for seed in range(20):
            grid = generate_world(8, 8, seed=seed)
            corpses = grid.find(Content.CORPSE)
            self.assertEqual(len(corpses), 1)
            corpse = corpses[0]
            self.assertGreaterEqual(corpse[0], 2)
            self.assertGreaterEqual(corpse[1], 2)
            for nb in grid.neighbors(corpse):
                self.assertEqual(grid.content_at(*nb), Content.BLOOD)
            self.assertEqual(len(grid.find(Content.KNIFE)), 1)
            self.assertEqual(grid.content_at(0, 0), Content.HOUSE)

    def test_precipices_ringed_by_gravel(self):
        for seed in range(20):
            grid = generate_world(8, 8, seed=seed, precipices=5)
            for r, c in zip(*np.nonzero(grid.terrain == Terrain.PRECIPICE)):
                for nb in grid.neighbors((int(r), int(c))):
                    self.assertIn(grid.terrain_at(*nb),
                                  (Terrain.GRAVEL, Terrain.PRECIPICE))

    def test_precipices_avoid_evidence(self):
        for seed in range(20):
            grid = generate_world(6, 6, seed=seed, precipices=6)
            for content in (Content.CORPSE, Content.KNIFE, Content.BLOOD):
                for pos in grid.find(content):
                    self.assertNotEqual(grid.terrain_at(*pos), Terrain.PRECIPICE)

    def test_seeded_generation_is_reproducible(self):
        a = generate_world(7, 9, seed=3)
        b = generate_world(7, 9, seed=3)
        np.testing.assert_array_equal(a.terrain, b.terrain)
        np.testing.assert_array_equal(a.content, b.content)

    def test_too_small(self):
        with self.assertRaises(ValueError):
            generate_world(2, 5)


if __name__ == "__main__":
    unittest.main()
