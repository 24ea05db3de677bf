"""
Sleuth: risk-weighted frontier exploration and pathfinding.

A detective agent explores a partially observed grid tile by tile, infers
precipice and corpse hazards for unseen cells from the terrain and
evidence it has already seen, picks which frontier cell to investigate
next, and walks a hazard-weighted shortest route to it while avoiding
cells held by other agents. Once both the knife and the corpse are found,
it walks home and the case is closed.
"""

from sleuth.grid import (
    Cell, Content, Coord, Direction, Grid, GridConfig, Terrain, VOID_CELL,
    generate_world, make_blood_trail_case, make_gravel_case, make_open_field,
    manhattan,
)
from sleuth.knowledge import AgentState, AgentStatus, CellBelief, KnowledgeMap
from sleuth.propagator import KnowledgePropagator, PropagationRules
from sleuth.frontier import FrontierSelector, STRATEGIES, select_riskiest
from sleuth.pathfinder import (
    Diagnostics, DiagnosticsLog, PathResult, Pathfinder, SearchState,
)
from sleuth.agent import AgentConfig, CaseResult, DetectiveAgent

__version__ = "0.1.0"
__all__ = [
    "Cell",
    "Content",
    "Coord",
    "Direction",
    "Grid",
    "GridConfig",
    "Terrain",
    "VOID_CELL",
    "generate_world",
    "make_blood_trail_case",
    "make_gravel_case",
    "make_open_field",
    "manhattan",
    "AgentState",
    "AgentStatus",
    "CellBelief",
    "KnowledgeMap",
    "KnowledgePropagator",
    "PropagationRules",
    "FrontierSelector",
    "STRATEGIES",
    "select_riskiest",
    "Diagnostics",
    "DiagnosticsLog",
    "PathResult",
    "Pathfinder",
    "SearchState",
    "AgentConfig",
    "CaseResult",
    "DetectiveAgent",
]
