"""Structural and physical legality checks for cube states.

``validate_basic`` catches malformed input (wrong shape, wrong sticker
counts, repeated centers). ``validate_physical_legality`` catches states that
are well formed but cannot be reached by turning faces: a piece that does not
exist, a twisted corner, a flipped edge, or a lone swap of two pieces.
Both raise the first violation they find and stop.
"""
import logging
from typing import Sequence

from .errors import (
    InvalidCornerOrientation,
    InvalidEdgeOrientation,
    InvalidFaceConfiguration,
    InvalidPermutationParity,
    InvalidStickerCount,
    NonUniqueCenters,
    ValidationError,
)
from .pieces import identify_corners, identify_edges
from .state import Color, CubeState, Face, color_counts

logger = logging.getLogger(__name__)


def validate_basic(state: CubeState):
    facelets = state.state
    if facelets.shape != (6, 3, 3):
        raise InvalidFaceConfiguration()
    if facelets.min() < 0 or facelets.max() >= len(Color):
        raise InvalidFaceConfiguration("Invalid face configuration. Unknown sticker color.")

    for color, count in color_counts(state).items():
        if count != 9:
            raise InvalidStickerCount(color, count)

    centers = [state.center(f) for f in Face]
    if len(set(centers)) != len(centers):
        raise NonUniqueCenters()


def corner_orientation_sum(corner_orientations: Sequence[int]) -> int:
    return sum(corner_orientations)


def edge_orientation_sum(edge_orientations: Sequence[int]) -> int:
    return sum(edge_orientations)


def permutation_parity(permutation: Sequence[int]) -> int:
    """0 for an even permutation, 1 for odd, from its disjoint cycles"""
    parity = 0
    visited = [False] * len(permutation)
    for start in range(len(permutation)):
        if visited[start]:
            continue
        length = 0
        j = start
        while not visited[j]:
            visited[j] = True
            j = permutation[j]
            length += 1
        parity ^= (length - 1) % 2
    return parity


def validate_physical_legality(state: CubeState):
    """Only meaningful once validate_basic has passed"""
    cp, co = identify_corners(state)
    ep, eo = identify_edges(state)

    if corner_orientation_sum(co) % 3 != 0:
        raise InvalidCornerOrientation()
    if edge_orientation_sum(eo) % 2 != 0:
        raise InvalidEdgeOrientation()
    if permutation_parity(cp) != permutation_parity(ep):
        raise InvalidPermutationParity()


def validate(state: CubeState):
    validate_basic(state)
    validate_physical_legality(state)


def is_valid(state: CubeState) -> bool:
    try:
        validate(state)
    except ValidationError as e:
        logger.debug("State rejected: %s", e)
        return False
    return True
