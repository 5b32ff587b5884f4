import logging
import random
from typing import List, Optional, Tuple

from .move import Amount, Move
from .state import CubeState, Face
from .transition import apply_moves

logger = logging.getLogger(__name__)

AMOUNTS = [Amount.CLOCKWISE, Amount.DOUBLE, Amount.COUNTERCLOCKWISE]


def generate_scramble(move_count: int, rng: Optional[random.Random] = None) -> List[Move]:
    """Generate non-redundant random move sequence"""
    if move_count < 0:
        raise ValueError(f"Scramble length must not be negative, got {move_count}")
    rng = rng or random

    moves = []
    prev_face = None
    while len(moves) < move_count:
        face = rng.choice(list(Face))

        # Avoid same face twice in a row
        if face == prev_face:
            continue

        moves.append(Move(face, rng.choice(AMOUNTS)))
        prev_face = face
    return moves


def scramble_state(move_count: int, rng: Optional[random.Random] = None) -> Tuple[CubeState, List[Move]]:
    """Scrambled state and the moves that produced it from solved"""
    moves = generate_scramble(move_count, rng)
    logger.debug("Scramble: %s", ' '.join(m.notation for m in moves))
    return apply_moves(CubeState(), moves), moves
