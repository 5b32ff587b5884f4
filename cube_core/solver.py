import logging
from collections import OrderedDict
from enum import Enum
from typing import List, NamedTuple, Optional

import kociemba

from .config import SolverConfig
from .errors import SolverError
from .move import Move, normalize_moves, parse_moves
from .pieces import to_cubies
from .state import CubeState
from .tables import get_tables, move_cubie
from .transition import apply_moves
from .validation import validate

logger = logging.getLogger(__name__)


class SolvePhase(Enum):
    EDGE_ORIENTATION = "Orient edges"
    CORNER_ORIENTATION = "Orient corners and place middle-layer edges"
    HALF_TURN_REDUCTION = "Reduce to half-turn group"
    HALF_TURN_FINISH = "Finish with half turns"

    @property
    def description(self) -> str:
        return self.value


PHASES = list(SolvePhase)


class SolveStep(NamedTuple):
    move: Move
    phase: SolvePhase
    description: str


class CubeSolver:
    """Solves any legal cube state.

    ``solve`` runs a four-phase subgroup reduction over exact distance
    tables, so it never searches or backtracks. ``distance`` and
    ``reference_solution`` defer to the kociemba two-phase solver instead.
    """

    CACHE_SIZE = 4096

    def __init__(self, config: Optional[SolverConfig] = None):
        self.config = config or SolverConfig()
        self._cache = OrderedDict()

    @property
    def tables(self):
        return get_tables(self.config.table_dir)

    def solve(self, state: CubeState) -> List[Move]:
        moves = [step.move for step in self.solve_with_explanations(state)]
        if self.config.normalize:
            moves = normalize_moves(moves)
        return moves

    def solve_with_explanations(self, state: CubeState) -> List[SolveStep]:
        validate(state)
        if state.is_solved():
            return []

        cube = to_cubies(state)
        steps = []
        for phase, table in zip(PHASES, self.tables.phases):
            idx = table.coordinate(cube)
            depth = int(table.dist[idx])
            if depth < 0:
                raise SolverError(f"{phase.value}: state outside the phase group")

            while depth > 0:
                for col, move in enumerate(table.moves):
                    nxt = int(table.step(idx, col))
                    if table.dist[nxt] == depth - 1:
                        break
                else:
                    raise SolverError(f"{phase.value}: no move lowers distance {depth}")
                idx, depth = nxt, depth - 1
                cube = cube.multiply(move_cubie(move))
                steps.append(SolveStep(move, phase, move.description))
            logger.debug("%s: %d moves", phase.value, sum(s.phase is phase for s in steps))

        if not cube.is_solved():
            raise SolverError("Phases finished without solving the cube")
        if self.config.verify and not apply_moves(state, [s.move for s in steps]).is_solved():
            raise SolverError("Solution does not solve the cube")
        return steps

    def distance(self, state: CubeState) -> int:
        """Length of kociemba's solution, cached for the last CACHE_SIZE states"""
        key = state.serialize()
        if key in self._cache:
            logger.debug("Distance cache hit for %s", key)
            self._cache.move_to_end(key)
            return self._cache[key]
        result = len(self.reference_solution(state))
        self._cache[key] = result
        if len(self._cache) > self.CACHE_SIZE:
            self._cache.popitem(last=False)
        return result

    def reference_solution(self, state: CubeState) -> List[Move]:
        validate(state)
        if state.is_solved():
            return []
        try:
            solution = kociemba.solve(state.to_kociemba())
        except ValueError as e:
            raise SolverError(f"kociemba rejected the state: {e}") from e
        return parse_moves(solution)


def solve(state: CubeState, config: Optional[SolverConfig] = None) -> List[Move]:
    return CubeSolver(config).solve(state)


def phase_lengths(steps: List[SolveStep]) -> dict:
    """Number of moves each phase contributed"""
    lengths = {phase: 0 for phase in PHASES}
    for step in steps:
        lengths[step.phase] += 1
    return lengths
