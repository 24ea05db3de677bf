"""Tests for the detective agent control loop."""

import unittest

from sleuth.agent import AgentConfig, DetectiveAgent
from sleuth.grid import (
    Content, Grid, GridConfig, Terrain, make_blood_trail_case, make_open_field,
    manhattan,
)
from sleuth.knowledge import AgentStatus
from sleuth.pathfinder import DiagnosticsLog


def make_corridor():
    """
    1x3 corridor: house, knife, corpse.

        H k C
    """
    return Grid(GridConfig(rows=1, cols=3, contents={
        (0, 1): Content.KNIFE, (0, 2): Content.CORPSE,
    }))


class TestLifecycle(unittest.TestCase):
    """Test waking, planning and walking."""

    def setUp(self):
        self.grid = make_open_field()
        self.agent = DetectiveAgent(self.grid, (1, 1), AgentConfig(seed=3))

    def test_spawn_claims_cell(self):
        self.assertEqual(self.agent.status, AgentStatus.SLEEPING)
        self.assertTrue(self.grid.is_occupied(1, 1))

    def test_sleeping_agent_does_not_plan(self):
        self.assertIsNone(self.agent.plan())

    def test_wake_observes_start(self):
        self.agent.wake()
        self.assertEqual(self.agent.status, AgentStatus.EXPLORING)
        self.assertTrue(self.agent.knowledge.belief((1, 1)).is_certain)
        self.assertEqual(len(self.agent.knowledge.frontier), 4)

    def test_plan_targets_frontier(self):
        self.agent.wake()
        result = self.agent.plan()
        self.assertTrue(result.found)
        self.assertIn(result.target, self.grid.neighbors((1, 1)))
        self.assertEqual(len(result), 1)

    def test_follow_moves_one_cell_per_iteration(self):
        self.agent.wake()
        result = self.agent.plan()
        target = result.target
        walk = self.agent.follow(result)
        self.assertEqual(next(walk), target)
        self.assertEqual(self.agent.position, target)
        self.assertTrue(self.grid.is_occupied(*target))
        self.assertFalse(self.grid.is_occupied(1, 1))
        self.assertTrue(self.agent.knowledge.belief(target).is_certain)
        with self.assertRaises(StopIteration):
            next(walk)

    def test_invalid_start(self):
        with self.assertRaises(ValueError):
            DetectiveAgent(self.grid, (3, 3))

    def test_occupied_start(self):
        DetectiveAgent(self.grid, (0, 0))
        with self.assertRaises(ValueError):
            DetectiveAgent(self.grid, (0, 0))
        self.assertTrue(self.grid.is_occupied(0, 0))

    def test_invalid_strategy(self):
        with self.assertRaises(ValueError):
            DetectiveAgent(self.grid, (0, 0), AgentConfig(strategy="bravest"))


class TestCorridorCase(unittest.TestCase):
    """Test a fully predictable case end to end."""

    def test_solves_corridor(self):
        agent = DetectiveAgent(make_corridor(), (0, 0), AgentConfig(seed=0))
        result = agent.run()

        self.assertTrue(result.solved)
        self.assertEqual(result.status, AgentStatus.CASE_CLOSED)
        self.assertTrue(result.found_knife)
        self.assertTrue(result.found_corpse)
        self.assertEqual(result.path, [(0, 0), (0, 1), (0, 2), (0, 1), (0, 0)])
        self.assertEqual(result.steps, 4)
        self.assertEqual(result.routes, 3)
        self.assertEqual(len(result.diagnostics), 3)
        self.assertTrue(all(d.success for d in result.diagnostics))

    def test_nearest_strategy_solves_corridor(self):
        agent = DetectiveAgent(make_corridor(), (0, 0),
                               AgentConfig(strategy="nearest", seed=0))
        result = agent.run()
        self.assertTrue(result.solved)
        self.assertEqual(result.path, [(0, 0), (0, 1), (0, 2), (0, 1), (0, 0)])

    def test_home_route_issued_once(self):
        agent = DetectiveAgent(make_corridor(), (0, 0), AgentConfig(seed=0))
        agent.run()
        self.assertTrue(agent.state.case_closed)
        self.assertIsNone(agent.plan())
        self.assertIsNone(agent.selector.select_target(agent.state, agent.knowledge))

    def test_knife_signal_reaches_corpse_cell(self):
        agent = DetectiveAgent(make_corridor(), (0, 0), AgentConfig(seed=0))
        agent.wake()
        for _ in agent.follow(agent.plan()):
            pass
        self.assertEqual(agent.position, (0, 1))
        self.assertEqual(agent.knowledge.hazard((0, 2)), -250)
        result = agent.plan()
        self.assertEqual(result.cost, -249)

    def test_summary(self):
        agent = DetectiveAgent(make_corridor(), (0, 0), AgentConfig(seed=0))
        summary = agent.run().summary()
        self.assertIn("Detective", summary)
        self.assertIn("case_closed", summary)

    def test_external_sink_receives_diagnostics(self):
        sink = DiagnosticsLog()
        agent = DetectiveAgent(make_corridor(), (0, 0), AgentConfig(seed=0), sink=sink)
        agent.run()
        self.assertEqual(len(sink), 3)
        self.assertEqual(sink.records, agent.diagnostics.records)

    def test_empty_log_sink_gets_one_record_per_search(self):
        sink = DiagnosticsLog()
        agent = DetectiveAgent(make_corridor(), (0, 0), AgentConfig(seed=0), sink=sink)
        self.assertIs(agent._sink, sink)
        agent.wake()
        agent.plan()
        self.assertEqual(len(sink), 1)
        self.assertEqual(sink.records, agent.diagnostics.records)


class TestEndings(unittest.TestCase):
    """Test the ways a case can end without being solved."""

    def test_agent_falls(self):
        grid = Grid(GridConfig(rows=1, cols=2, terrain={(0, 1): Terrain.PRECIPICE}))
        agent = DetectiveAgent(grid, (0, 0))
        result = agent.run()
        self.assertEqual(result.status, AgentStatus.FALLEN)
        self.assertFalse(result.solved)
        self.assertEqual(result.path, [(0, 0), (0, 1)])
        self.assertIsNone(agent.plan())

    def test_frontier_exhausted(self):
        agent = DetectiveAgent(Grid(GridConfig(rows=1, cols=2)), (0, 0))
        result = agent.run()
        self.assertEqual(result.status, AgentStatus.EXPLORING)
        self.assertFalse(result.solved)
        self.assertEqual(result.steps, 1)

    def test_step_limit(self):
        agent = DetectiveAgent(make_open_field(5, 5), (0, 0))
        result = agent.run(max_steps=3)
        self.assertLessEqual(result.steps, 3)

    def test_blocked_by_other_agent(self):
        grid = make_corridor()
        DetectiveAgent(grid, (0, 1))
        agent = DetectiveAgent(grid, (0, 0))
        result = agent.run()
        self.assertEqual(result.routes, 0)
        self.assertEqual(result.steps, 0)
        self.assertFalse(result.diagnostics[-1].success)
        self.assertTrue(grid.is_occupied(0, 1))


class TestStrategiesSolveCases(unittest.TestCase):
    """Without precipices every strategy must eventually close the case."""

    def test_blood_trail_case(self):
        for strategy in ("riskiest", "random", "distracted", "median",
                         "cautious", "centre", "nearest"):
            with self.subTest(strategy=strategy):
                grid = make_blood_trail_case()
                agent = DetectiveAgent(grid, (0, 0),
                                       AgentConfig(strategy=strategy, seed=7,
                                                   max_steps=5000))
                result = agent.run()
                self.assertTrue(result.solved, result.summary())
                self.assertEqual(agent.position, (0, 0))
                agent.knowledge.check_invariants()

    def test_path_is_contiguous(self):
        agent = DetectiveAgent(make_blood_trail_case(), (0, 0),
                               AgentConfig(seed=1, max_steps=5000))
        result = agent.run()
        for a, b in zip(result.path, result.path[1:]):
            self.assertEqual(manhattan(a, b), 1)


if __name__ == "__main__":
    unittest.main()
