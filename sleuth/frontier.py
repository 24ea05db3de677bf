"""
Frontier selection — which unknown cell the detective investigates next.

The default strategy is deliberately counter-intuitive: it targets the
riskiest frontier cell, investigating danger first. Ties are broken
stochastically with a biased coin (replace the current best with
probability 0.3), so the final choice among equal scores depends on the
order in which the frontier was discovered.

Alternative detectives:
- random:     any frontier cell, uniformly
- distracted: a uniform choice among the safest cells
- median:     the middle of the safest cells, jittered by one position
- cautious:   the safest cell, ties going away from the map edge, then
              closer to the agent
- centre:     the safest cell, ties going closer to the map centre, then
              as cautious

A seeded random.Random is injected so that every choice is reproducible.
Every strategy also receives the agent position; only the deterministic
detectives use it.
"""

from __future__ import annotations

import logging
import random
from typing import Callable, Collection, Dict, List, Optional, Sequence

from sleuth.grid import Coord, manhattan
from sleuth.knowledge import AgentState, AgentStatus, KnowledgeMap

logger = logging.getLogger(__name__)

Strategy = Callable[
    [Sequence[Coord], KnowledgeMap, random.Random, Optional[Coord]], Optional[Coord]
]


def select_riskiest(frontier: Sequence[Coord], knowledge: KnowledgeMap,
                    rng: random.Random, position: Optional[Coord] = None) -> Optional[Coord]:
    """Highest hazard score wins; equal scores replace the best 30% of the time."""
    if not frontier:
        return None
    best = frontier[0]
    best_score = knowledge.hazard(best)
    for candidate in frontier[1:]:
        score = knowledge.hazard(candidate)
        if score == best_score:
            if rng.randrange(10) > 6:
                best = candidate
        elif score > best_score:
            best, best_score = candidate, score
    return best


def select_random(frontier: Sequence[Coord], knowledge: KnowledgeMap,
                  rng: random.Random, position: Optional[Coord] = None) -> Optional[Coord]:
    if not frontier:
        return None
    return frontier[rng.randrange(len(frontier))]


def _safest(frontier: Sequence[Coord], knowledge: KnowledgeMap) -> List[Coord]:
    """Frontier cells sharing the lowest hazard score, in frontier order."""
    lowest = min(knowledge.hazard(pos) for pos in frontier)
    return [pos for pos in frontier if knowledge.hazard(pos) == lowest]


def select_distracted(frontier: Sequence[Coord], knowledge: KnowledgeMap,
                      rng: random.Random, position: Optional[Coord] = None) -> Optional[Coord]:
    if not frontier:
        return None
    options = _safest(frontier, knowledge)
    return options[rng.randrange(len(options))]


def select_median(frontier: Sequence[Coord], knowledge: KnowledgeMap,
                  rng: random.Random, position: Optional[Coord] = None) -> Optional[Coord]:
    if not frontier:
        return None
    options = _safest(frontier, knowledge)
    offset = rng.choice((-1, 0)) if len(options) > 1 else 0
    return options[len(options) // 2 + offset]


def _prefer_inland(best: Coord, candidate: Coord, knowledge: KnowledgeMap,
                   position: Optional[Coord]) -> Coord:
    """
    Tie-break between two equally safe cells.

    Each check may hand the lead to the candidate, and later checks compare
    against the new leader: off the top or left edge first, then off the
    bottom or right edge, then closer to the agent.
    """
    last_row, last_col = knowledge.rows - 1, knowledge.cols - 1
    if (best[1] == 0 and candidate[1] != 0) or (best[0] == 0 and candidate[0] != 0):
        best = candidate
    if ((best[1] == last_col and candidate[1] != last_col)
            or (best[0] == last_row and candidate[0] != last_row)):
        best = candidate
    if position is not None and manhattan(best, position) > manhattan(candidate, position):
        best = candidate
    return best


def select_cautious(frontier: Sequence[Coord], knowledge: KnowledgeMap,
                    rng: random.Random, position: Optional[Coord] = None) -> Optional[Coord]:
    """Lowest hazard score wins; ties avoid the map edge, then favor nearby cells."""
    if not frontier:
        return None
    best = frontier[0]
    for candidate in frontier[1:]:
        score, best_score = knowledge.hazard(candidate), knowledge.hazard(best)
        if score == best_score:
            best = _prefer_inland(best, candidate, knowledge, position)
        elif score < best_score:
            best = candidate
    return best


def select_centre(frontier: Sequence[Coord], knowledge: KnowledgeMap,
                  rng: random.Random, position: Optional[Coord] = None) -> Optional[Coord]:
    """Lowest hazard score wins; ties favor the map centre, then as cautious."""
    if not frontier:
        return None
    centre = (knowledge.rows // 2, knowledge.cols // 2)
    best = frontier[0]
    for candidate in frontier[1:]:
        score, best_score = knowledge.hazard(candidate), knowledge.hazard(best)
        if score == best_score:
            from_centre = manhattan(candidate, centre)
            best_from_centre = manhattan(best, centre)
            if from_centre < best_from_centre:
                best = candidate
            elif from_centre == best_from_centre:
                best = _prefer_inland(best, candidate, knowledge, position)
        elif score < best_score:
            best = candidate
    return best


STRATEGIES: Dict[str, Strategy] = {
    "riskiest": select_riskiest,
    "random": select_random,
    "distracted": select_distracted,
    "median": select_median,
    "cautious": select_cautious,
    "centre": select_centre,
}


class FrontierSelector:
    """
    Picks the next target for one agent.

    Once both the knife and the corpse are found, the next call returns the
    home cell and latches case_closed; every later call returns None so the
    home route is issued exactly once.
    """

    def __init__(self, strategy: str = "riskiest",
                 rng: Optional[random.Random] = None):
        if strategy not in STRATEGIES:
            raise ValueError(
                f"unknown strategy {strategy!r}, expected one of {sorted(STRATEGIES)}"
            )
        self.strategy = strategy
        self._choose = STRATEGIES[strategy]
        self.rng = rng or random.Random()

    def select_target(self, state: AgentState, knowledge: KnowledgeMap,
                      exclude: Collection[Coord] = ()) -> Optional[Coord]:
        """Next target, the home cell once, or None when there is nothing left."""
        if state.case_closed:
            return None
        if state.evidence_complete:
            state.case_closed = True
            state.status = AgentStatus.GOING_HOME
            logger.info("case solved, heading home to %s", state.home)
            return state.home

        frontier = [pos for pos in knowledge.frontier if pos not in exclude]
        target = self._choose(frontier, knowledge, self.rng, state.position)
        if target is None:
            logger.info("frontier exhausted at %s", state.position)
        return target
