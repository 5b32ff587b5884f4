"""Face-turn transition engine.

A clockwise quarter turn of a face rotates that face's 3x3 grid and carries
the ring of twelve stickers around it one strip further. ``RINGS`` lists,
for every face, the four strips of that ring in the order a clockwise turn
carries them: strip ``k`` lands on strip ``k + 1`` and the last wraps to the
first. Indices inside each strip are paired element by element.
"""
from typing import Iterable, Union

import numpy as np

from .move import Move, parse_moves
from .state import CubeState, Face

U, D, L, R, F, B = Face.UP, Face.DOWN, Face.LEFT, Face.RIGHT, Face.FRONT, Face.BACK

RINGS = {
    U: ((F, (0, 1, 2)), (L, (0, 1, 2)), (B, (0, 1, 2)), (R, (0, 1, 2))),
    D: ((F, (6, 7, 8)), (R, (6, 7, 8)), (B, (6, 7, 8)), (L, (6, 7, 8))),
    L: ((U, (0, 3, 6)), (F, (0, 3, 6)), (D, (0, 3, 6)), (B, (8, 5, 2))),
    R: ((F, (2, 5, 8)), (U, (2, 5, 8)), (B, (6, 3, 0)), (D, (2, 5, 8))),
    F: ((U, (6, 7, 8)), (R, (0, 3, 6)), (D, (2, 1, 0)), (L, (8, 5, 2))),
    B: ((U, (2, 1, 0)), (L, (0, 3, 6)), (D, (6, 7, 8)), (R, (8, 5, 2))),
}


def rotate_grid(grid, quarters=1):
    """Rotate an n x n grid clockwise: new[i][j] = old[n-1-j][i] per quarter turn"""
    n = len(grid)
    for _ in range(quarters % 4):
        grid = [[grid[n - 1 - j][i] for j in range(n)] for i in range(n)]
    return grid


def _quarter_turn(facelets, face):
    facelets[face] = np.array(rotate_grid(facelets[face].tolist()), dtype=facelets.dtype)

    flat = facelets.reshape(6, 9)
    ring = RINGS[face]
    current = [flat[f, list(idx)].copy() for f, idx in ring]
    rotated = current[-1:] + current[:-1]
    for (f, idx), colors in zip(ring, rotated):
        flat[f, list(idx)] = colors


def apply_move(state: CubeState, move: Move) -> CubeState:
    """Apply one move and return the resulting state; ``state`` is left untouched"""
    facelets = state.state.copy()
    for _ in range(move.quarters):
        _quarter_turn(facelets, move.face)
    return CubeState(facelets)


def apply_moves(state: CubeState, moves: Union[str, Iterable[Move]]) -> CubeState:
    """Apply move sequence to state; a string is parsed as notation first"""
    if isinstance(moves, str):
        moves = parse_moves(moves)
    for move in moves:
        if isinstance(move, str):
            move = Move.parse(move)
        state = apply_move(state, move)
    return state
