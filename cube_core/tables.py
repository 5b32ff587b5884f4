"""Coordinate move tables and exact distance tables for the four solver phases.

Each phase reduces the cube into a smaller subgroup:

    G0 = <U, D, L, R, F, B>
    G1 = <U, D, L, R, F2, B2>     edges oriented
    G2 = <U, D, L2, R2, F2, B2>   corners oriented, E-slice edges in the E slice
    G3 = <U2, D2, L2, R2, F2, B2> half-turn group
    G4 = {solved}

For every phase a coordinate identifies the coset of the next subgroup a
cube belongs to. The move tables map ``(coordinate, move)`` to the next
coordinate and the distance tables hold the exact number of phase moves
needed to reach the goal coordinate, filled in by breadth-first search.
"""
import logging
import os
import zipfile
from functools import lru_cache
from itertools import combinations, permutations
from typing import Callable, List, NamedTuple, Optional

import numpy as np

from .move import ALL_MOVES, Amount, Move
from .pieces import CubieCube, to_cubies
from .state import CubeState, Face
from .transition import apply_move

logger = logging.getLogger(__name__)

TABLE_FILE = 'cube-core-tables-v1.npz'

U, D, L, R, F, B = Face.UP, Face.DOWN, Face.LEFT, Face.RIGHT, Face.FRONT, Face.BACK

PHASE_MOVES = [
    list(ALL_MOVES),
    [m for m in ALL_MOVES if m.face in (U, D, L, R) or m.amount is Amount.DOUBLE],
    [m for m in ALL_MOVES if m.face in (U, D) or m.amount is Amount.DOUBLE],
    [m for m in ALL_MOVES if m.amount is Amount.DOUBLE],
]

# Edge slots of the three middle slices; E-slice edges are slots 8..11
M_SLICE = (1, 3, 5, 7)
S_SLICE = (0, 2, 4, 6)
E_SLICE = (8, 9, 10, 11)
SLICES = (M_SLICE, S_SLICE, E_SLICE)

N_FLIP = 2 ** 11
N_TWIST = 3 ** 7
N_SLICE = 495      # C(12, 4)
N_CORNER = 40320   # 8!
N_COSET = 420      # 8! / |half-turn corner group|
N_MCOMB = 70       # C(8, 4)
N_HALF = 96        # corner permutations reachable with half turns only
N_SLICE_PERM = 24 ** 3

PERM4 = np.array(list(permutations(range(4))), dtype=np.int8)
PERM8 = np.array(list(permutations(range(8))), dtype=np.int8)


@lru_cache(maxsize=None)
def move_cubie(move: Move) -> CubieCube:
    """Cubie view of a single move applied to the solved cube"""
    return to_cubies(apply_move(CubeState(), move))


# Ranking helpers. Ranks follow lexicographic order, so rank r is row r of
# itertools.permutations(range(n)).

def rank_permutation(perm) -> int:
    n = len(perm)
    rank = 0
    for i in range(n - 1):
        smaller = sum(1 for j in range(i + 1, n) if perm[j] < perm[i])
        rank = rank * (n - i) + smaller
    return rank


def rank_permutations(perms: np.ndarray) -> np.ndarray:
    """Vectorized rank_permutation over the last axis"""
    perms = np.asarray(perms)
    n = perms.shape[-1]
    ranks = np.zeros(perms.shape[:-1], dtype=np.int64)
    for i in range(n - 1):
        smaller = (perms[..., i + 1:] < perms[..., i:i + 1]).sum(axis=-1)
        ranks = ranks * (n - i) + smaller
    return ranks


def _combination_tables(n, k):
    """Occupancy rows for every k-subset of n slots and a bitmask -> index lookup"""
    combos = list(combinations(range(n), k))
    occupancy = np.zeros((len(combos), n), dtype=bool)
    index = np.full(1 << n, -1, dtype=np.int32)
    for i, combo in enumerate(combos):
        occupancy[i, list(combo)] = True
        index[sum(1 << s for s in combo)] = i
    return occupancy, index


SLICE_OCCUPANCY, SLICE_INDEX = _combination_tables(12, 4)
MCOMB_OCCUPANCY, MCOMB_INDEX = _combination_tables(8, 4)


def half_turn_corner_group() -> List[tuple]:
    """All corner permutations generated by half turns, sorted"""
    generators = [move_cubie(m).cp for m in PHASE_MOVES[3]]
    group = {tuple(range(8))}
    frontier = list(group)
    while frontier:
        found = []
        for perm in frontier:
            for g in generators:
                nxt = tuple(perm[g[i]] for i in range(8))
                if nxt not in group:
                    group.add(nxt)
                    found.append(nxt)
        frontier = found
    return sorted(group)


# Coordinates of a single cube

def flip_coordinate(cube: CubieCube) -> int:
    code = 0
    for o in cube.eo[:11]:
        code = code * 2 + o
    return code


def twist_coordinate(cube: CubieCube) -> int:
    code = 0
    for o in cube.co[:7]:
        code = code * 3 + o
    return code


def slice_coordinate(cube: CubieCube) -> int:
    mask = sum(1 << slot for slot, piece in enumerate(cube.ep) if piece in E_SLICE)
    return int(SLICE_INDEX[mask])


def mcomb_coordinate(cube: CubieCube) -> int:
    mask = sum(1 << slot for slot in range(8) if cube.ep[slot] in M_SLICE)
    return int(MCOMB_INDEX[mask])


def slice_perm_coordinate(cube: CubieCube) -> int:
    code = 0
    for slots in SLICES:
        local = [slots.index(cube.ep[s]) for s in slots]
        code = code * 24 + rank_permutation(local)
    return code


# Move tables

def _digits(count, base, width):
    """Most significant digit first, matching the coordinate functions"""
    powers = base ** np.arange(width - 1, -1, -1)
    return (np.arange(count)[:, None] // powers) % base, powers


def build_flip_moves(moves) -> np.ndarray:
    digits, powers = _digits(N_FLIP, 2, 11)
    eo = np.concatenate([digits, digits.sum(axis=1, keepdims=True) % 2], axis=1)
    table = np.empty((N_FLIP, len(moves)), dtype=np.int32)
    for col, move in enumerate(moves):
        m = move_cubie(move)
        new = (eo[:, list(m.ep)] + np.array(m.eo)) % 2
        table[:, col] = new[:, :11] @ powers
    return table


def build_twist_moves(moves) -> np.ndarray:
    digits, powers = _digits(N_TWIST, 3, 7)
    co = np.concatenate([digits, (-digits.sum(axis=1, keepdims=True)) % 3], axis=1)
    table = np.empty((N_TWIST, len(moves)), dtype=np.int32)
    for col, move in enumerate(moves):
        m = move_cubie(move)
        new = (co[:, list(m.cp)] + np.array(m.co)) % 3
        table[:, col] = new[:, :7] @ powers
    return table


def build_combination_moves(occupancy, index, moves) -> np.ndarray:
    n = occupancy.shape[1]
    weights = 1 << np.arange(n)
    table = np.empty((len(occupancy), len(moves)), dtype=np.int32)
    for col, move in enumerate(moves):
        new = occupancy[:, list(move_cubie(move).ep[:n])]
        table[:, col] = index[new.astype(np.int64) @ weights]
    return table


def build_corner_moves(moves) -> np.ndarray:
    """Rank of every corner permutation after each move, shape (8!, moves)"""
    table = np.empty((N_CORNER, len(moves)), dtype=np.int32)
    for col, move in enumerate(moves):
        table[:, col] = rank_permutations(PERM8[:, list(move_cubie(move).cp)])
    return table


def build_cosets(group):
    """Index of the right coset ``H*c`` of every corner permutation c"""
    key = np.full(N_CORNER, N_CORNER, dtype=np.int64)
    for h in group:
        key = np.minimum(key, rank_permutations(np.array(h, dtype=np.int8)[PERM8]))
    representatives, coset_of = np.unique(key, return_inverse=True)
    return representatives, coset_of.astype(np.int32)


def build_slice_perm_moves(moves) -> np.ndarray:
    table = np.empty((len(SLICES), 24, len(moves)), dtype=np.int32)
    for col, move in enumerate(moves):
        ep = move_cubie(move).ep
        for k, slots in enumerate(SLICES):
            loc = [slots.index(ep[s]) for s in slots]
            table[k, :, col] = rank_permutations(PERM4[:, loc])
    return table


def breadth_first_distances(size, start, step, n_moves) -> np.ndarray:
    """Exact move distance of every coordinate from ``start``; -1 if unreachable"""
    dist = np.full(size, -1, dtype=np.int8)
    dist[start] = 0
    frontier = np.array([start], dtype=np.int64)
    depth = 0
    while frontier.size:
        for col in range(n_moves):
            nxt = step(frontier, col)
            dist[nxt[dist[nxt] < 0]] = depth + 1
        depth += 1
        frontier = np.flatnonzero(dist == depth)
    return dist


class Phase(NamedTuple):
    moves: List[Move]
    coordinate: Callable[[CubieCube], int]
    step: Callable
    dist: np.ndarray


class SolverTables:
    """Move and distance tables for all four phases.

    Built from scratch or restored from an ``.npz`` archive with the same
    array names.
    """

    ARRAYS = (
        'flip_move', 'phase1_dist',
        'twist_move', 'slice_move', 'phase2_dist',
        'coset_of', 'coset_move', 'mcomb_move', 'phase3_dist',
        'half_index', 'half_move', 'slice_perm_move', 'phase4_dist',
    )

    def __init__(self, arrays):
        for name in self.ARRAYS:
            setattr(self, name, arrays[name])
        self.phases = [
            Phase(PHASE_MOVES[0], self.phase1_coordinate, self.phase1_step, self.phase1_dist),
            Phase(PHASE_MOVES[1], self.phase2_coordinate, self.phase2_step, self.phase2_dist),
            Phase(PHASE_MOVES[2], self.phase3_coordinate, self.phase3_step, self.phase3_dist),
            Phase(PHASE_MOVES[3], self.phase4_coordinate, self.phase4_step, self.phase4_dist),
        ]

    @classmethod
    def build(cls) -> 'SolverTables':
        arrays = {}
        tables = cls.__new__(cls)

        logger.debug("Building phase 1 tables")
        arrays['flip_move'] = tables.flip_move = build_flip_moves(PHASE_MOVES[0])

        logger.debug("Building phase 2 tables")
        arrays['twist_move'] = tables.twist_move = build_twist_moves(PHASE_MOVES[1])
        arrays['slice_move'] = tables.slice_move = build_combination_moves(
            SLICE_OCCUPANCY, SLICE_INDEX, PHASE_MOVES[1])

        logger.debug("Building phase 3 tables")
        group = half_turn_corner_group()
        representatives, coset_of = build_cosets(group)
        corner_moves = build_corner_moves(PHASE_MOVES[2])
        arrays['coset_of'] = tables.coset_of = coset_of
        arrays['coset_move'] = tables.coset_move = coset_of[corner_moves[representatives]]
        arrays['mcomb_move'] = tables.mcomb_move = build_combination_moves(
            MCOMB_OCCUPANCY, MCOMB_INDEX, PHASE_MOVES[2])

        logger.debug("Building phase 4 tables")
        group_ranks = rank_permutations(np.array(group, dtype=np.int8))
        half_index = np.full(N_CORNER, -1, dtype=np.int32)
        half_index[group_ranks] = np.arange(len(group))
        half_move = np.empty((len(group), len(PHASE_MOVES[3])), dtype=np.int32)
        for col, move in enumerate(PHASE_MOVES[3]):
            moved = np.array(group, dtype=np.int8)[:, list(move_cubie(move).cp)]
            half_move[:, col] = half_index[rank_permutations(moved)]
        arrays['half_index'] = tables.half_index = half_index
        arrays['half_move'] = tables.half_move = half_move
        arrays['slice_perm_move'] = tables.slice_perm_move = build_slice_perm_moves(PHASE_MOVES[3])

        goals = [
            (N_FLIP, 0, tables.phase1_step),
            (N_TWIST * N_SLICE, tables._phase2_goal(), tables.phase2_step),
            (N_COSET * N_MCOMB, tables._phase3_goal(), tables.phase3_step),
            (N_HALF * N_SLICE_PERM, tables._phase4_goal(), tables.phase4_step),
        ]
        for number, (size, start, step) in enumerate(goals, 1):
            dist = breadth_first_distances(size, start, step, len(PHASE_MOVES[number - 1]))
            arrays[f'phase{number}_dist'] = dist
            logger.debug("Phase %d: %d coordinates, depth %d", number, size, dist.max())

        return cls(arrays)

    # Phase 1: edge orientation

    def phase1_coordinate(self, cube):
        return flip_coordinate(cube)

    def phase1_step(self, idx, col):
        return self.flip_move[idx, col]

    # Phase 2: corner orientation and E-slice placement

    def phase2_coordinate(self, cube):
        return twist_coordinate(cube) * N_SLICE + slice_coordinate(cube)

    def phase2_step(self, idx, col):
        twist, comb = np.divmod(idx, N_SLICE)
        return self.twist_move[twist, col] * N_SLICE + self.slice_move[comb, col]

    def _phase2_goal(self):
        return int(SLICE_INDEX[sum(1 << s for s in E_SLICE)])

    # Phase 3: corners into the half-turn coset, M-slice edges into the M slice

    def phase3_coordinate(self, cube):
        coset = int(self.coset_of[rank_permutation(cube.cp)])
        return coset * N_MCOMB + mcomb_coordinate(cube)

    def phase3_step(self, idx, col):
        coset, comb = np.divmod(idx, N_MCOMB)
        return self.coset_move[coset, col] * N_MCOMB + self.mcomb_move[comb, col]

    def _phase3_goal(self):
        return int(self.coset_of[0]) * N_MCOMB + int(MCOMB_INDEX[sum(1 << s for s in M_SLICE)])

    # Phase 4: half turns only

    def phase4_coordinate(self, cube):
        corners = int(self.half_index[rank_permutation(cube.cp)])
        return corners * N_SLICE_PERM + slice_perm_coordinate(cube)

    def phase4_step(self, idx, col):
        corners, perms = np.divmod(idx, N_SLICE_PERM)
        m, rest = np.divmod(perms, 576)
        s, e = np.divmod(rest, 24)
        table = self.slice_perm_move
        perms = (table[0, m, col] * 24 + table[1, s, col]) * 24 + table[2, e, col]
        return self.half_move[corners, col] * N_SLICE_PERM + perms

    def _phase4_goal(self):
        return int(self.half_index[0]) * N_SLICE_PERM

    # Persistence

    def save(self, path):
        np.savez_compressed(path, **{name: getattr(self, name) for name in self.ARRAYS})

    @classmethod
    def load(cls, path) -> 'SolverTables':
        with np.load(path) as data:
            return cls({name: data[name] for name in cls.ARRAYS})


@lru_cache(maxsize=None)
def get_tables(table_dir: Optional[str] = None) -> SolverTables:
    """Solver tables, built once per process and per cache directory.

    With ``table_dir`` set the tables are read from ``TABLE_FILE`` in that
    directory when present, and written there after a fresh build.
    """
    path = os.path.join(table_dir, TABLE_FILE) if table_dir else None
    if path and os.path.exists(path):
        try:
            tables = SolverTables.load(path)
        except (OSError, KeyError, ValueError, zipfile.BadZipFile) as e:
            logger.warning("Ignoring unreadable table cache %s: %s", path, e)
        else:
            logger.debug("Loaded solver tables from %s", path)
            return tables

    tables = SolverTables.build()
    if path:
        os.makedirs(table_dir, exist_ok=True)
        tables.save(path)
        logger.debug("Saved solver tables to %s", path)
    return tables
