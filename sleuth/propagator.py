"""
Knowledge propagator — turns one physical visit into updated beliefs.

When the agent arrives at a cell it learns the cell's ground truth and
draws conclusions about the 4 neighbors:

    arrive → certainty at the cell → frontier update → hazard propagation

Terrain rules (precipice risk):
- Gravel rings every precipice, so unknown neighbors of gravel share a
  fixed amount of precipice risk, split by the number of unknown neighbors
- Grass is evidence of safety: every neighbor is ruled out as a precipice

Content rules (corpse risk, negative = corpse likely):
- Blood subtracts a share of corpse risk from neighbors with unknown content
- The knife spreads a weaker version of the same signal
- Once the corpse has been found, blood/knife/corpse cells reset the
  neighbors' corpse risk to zero
- An empty cell rules out a corpse next to it
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

from sleuth.grid import Content, Coord, Grid, Terrain
from sleuth.knowledge import AgentState, AgentStatus, CellBelief, KnowledgeMap

logger = logging.getLogger(__name__)


@dataclass
class PropagationRules:
    """Amounts spread to unknown neighbors, split by their count."""
    precipice_spread: int = 1000   # from gravel
    blood_spread: int = 500        # from blood
    knife_spread: int = 250        # from the knife


class KnowledgePropagator:
    """
    Updates one agent's KnowledgeMap and discovery flags from ground truth.

    observe() must be called on the first physical visit to a cell. Calling
    it again on a certain cell is allowed (repeat pass) and re-applies the
    neighbor rules with the ground truth unchanged.
    """

    def __init__(self, grid: Grid, knowledge: KnowledgeMap, state: AgentState,
                 rules: PropagationRules = None):
        self.grid = grid
        self.knowledge = knowledge
        self.state = state
        self.rules = rules or PropagationRules()

    def observe(self, position: Coord) -> CellBelief:
        """Record the ground truth at position and propagate to its neighbors."""
        belief = self.knowledge.belief(position)
        if belief is None:
            raise ValueError(f"cannot observe {position}: outside the grid")
        truth = self.grid.cell_at(position)

        # 1. Certainty at the visited cell
        if belief.is_certain:
            assert (belief.terrain, belief.content) == (truth.terrain, truth.content), \
                f"belief at {position} contradicts ground truth {truth}"
        belief.terrain = truth.terrain
        belief.content = truth.content
        belief.precipice_risk = 0
        belief.corpse_risk = 0
        belief.ruled_out_precipice = True
        belief.ruled_out_corpse = True
        self.knowledge.discard_frontier(position)

        # 2. Unknown neighbors join the frontier
        neighbors = self.knowledge.neighbors(position)
        unknown = []
        for nb in neighbors:
            if not self.knowledge.belief(nb).is_certain:
                self.knowledge.add_frontier(nb)
                unknown.append(nb)

        # 3. Fan-out divisor
        n = len(unknown)
        if n > 0:
            self._propagate_terrain(truth.terrain, neighbors, n)
            self._propagate_content(truth.content, neighbors, n)

        # 6. Discovery flags
        self._update_discoveries(position, truth.terrain, truth.content)
        return belief

    def _propagate_terrain(self, terrain: Terrain, neighbors: List[Coord], n: int) -> None:
        """Step 4: precipice risk from gravel, safety from grass."""
        share = self.rules.precipice_spread // n
        for nb in neighbors:
            belief = self.knowledge.belief(nb)
            if terrain == Terrain.GRAVEL:
                if not belief.is_certain and not belief.ruled_out_precipice:
                    belief.precipice_risk += share
            elif terrain == Terrain.GRASS:
                belief.ruled_out_precipice = True
                belief.precipice_risk = 0

    def _propagate_content(self, content: Content, neighbors: List[Coord], n: int) -> None:
        """Step 5: corpse risk from blood and knife, reset after the corpse."""
        if content == Content.BLOOD:
            self._spread_corpse_signal(neighbors, self.rules.blood_spread // n)
        elif content == Content.KNIFE:
            self._spread_corpse_signal(neighbors, self.rules.knife_spread // n)
        elif content == Content.CORPSE:
            if self.state.found_corpse:
                for nb in neighbors:
                    self.knowledge.belief(nb).corpse_risk = 0
        elif content == Content.NOTHING:
            for nb in neighbors:
                belief = self.knowledge.belief(nb)
                belief.corpse_risk = 0
                belief.ruled_out_corpse = True

    def _spread_corpse_signal(self, neighbors: List[Coord], share: int) -> None:
        for nb in neighbors:
            belief = self.knowledge.belief(nb)
            if self.state.found_corpse:
                belief.corpse_risk = 0
            elif belief.content == Content.UNKNOWN and not belief.ruled_out_corpse:
                belief.corpse_risk -= share

    def _update_discoveries(self, position: Coord, terrain: Terrain, content: Content) -> None:
        state = self.state
        if content == Content.KNIFE and not state.found_knife:
            state.found_knife = True
            logger.info("knife found at %s", position)
        elif content == Content.CORPSE and not state.found_corpse:
            state.found_corpse = True
            logger.info("body found at %s", position)

        if terrain == Terrain.PRECIPICE:
            state.status = AgentStatus.FALLEN
            state.case_closed = True
            logger.warning("agent fell over the edge at %s", position)
