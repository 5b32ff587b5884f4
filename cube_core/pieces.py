"""Corner and edge pieces read off a facelet state.

Corner slots list their up/down facelet first, followed by the other two in
clockwise order; edge slots list the up/down facelet first, or the
front/back facelet for the four middle-layer edges. With that ordering the
orientation of a piece is simply where its reference color sits.
"""
from typing import List, NamedTuple, Tuple

from .errors import InvalidPieceColors
from .state import Color, CubeState, Face

U, D, L, R, F, B = Face.UP, Face.DOWN, Face.LEFT, Face.RIGHT, Face.FRONT, Face.BACK

CORNER_NAMES = ['URF', 'UFL', 'ULB', 'UBR', 'DFR', 'DLF', 'DBL', 'DRB']
CORNER_FACELETS = [
    ((U, 8), (R, 0), (F, 2)),
    ((U, 6), (F, 0), (L, 2)),
    ((U, 0), (L, 0), (B, 2)),
    ((U, 2), (B, 0), (R, 2)),
    ((D, 2), (F, 8), (R, 6)),
    ((D, 0), (L, 8), (F, 6)),
    ((D, 6), (B, 8), (L, 6)),
    ((D, 8), (R, 8), (B, 6)),
]

EDGE_NAMES = ['UR', 'UF', 'UL', 'UB', 'DR', 'DF', 'DL', 'DB', 'FR', 'FL', 'BL', 'BR']
EDGE_FACELETS = [
    ((U, 5), (R, 1)),
    ((U, 7), (F, 1)),
    ((U, 3), (L, 1)),
    ((U, 1), (B, 1)),
    ((D, 5), (R, 7)),
    ((D, 1), (F, 7)),
    ((D, 3), (L, 7)),
    ((D, 7), (B, 7)),
    ((F, 5), (R, 3)),
    ((F, 3), (L, 5)),
    ((B, 5), (L, 3)),
    ((B, 3), (R, 5)),
]


class CornerPiece(NamedTuple):
    colors: Tuple[Color, Color, Color]
    position: int


class EdgePiece(NamedTuple):
    colors: Tuple[Color, Color]
    position: int


class CubieCube(NamedTuple):
    """Per-slot piece and orientation arrays.

    ``cp[i]`` is the corner piece sitting in corner slot ``i`` and ``co[i]``
    its twist; ``ep``/``eo`` are the same for edges. Piece ids are the slot
    numbers they occupy when solved.
    """
    cp: Tuple[int, ...]
    co: Tuple[int, ...]
    ep: Tuple[int, ...]
    eo: Tuple[int, ...]

    def multiply(self, other: 'CubieCube') -> 'CubieCube':
        """Apply ``other`` after ``self``"""
        cp = tuple(self.cp[other.cp[i]] for i in range(8))
        co = tuple((self.co[other.cp[i]] + other.co[i]) % 3 for i in range(8))
        ep = tuple(self.ep[other.ep[i]] for i in range(12))
        eo = tuple((self.eo[other.ep[i]] + other.eo[i]) % 2 for i in range(12))
        return CubieCube(cp, co, ep, eo)

    def is_solved(self) -> bool:
        return self == SOLVED_CUBIE


SOLVED_CUBIE = CubieCube(tuple(range(8)), (0,) * 8, tuple(range(12)), (0,) * 12)


def extract_corners(state: CubeState) -> List[CornerPiece]:
    return [CornerPiece(tuple(state.get(f, i) for f, i in slot), pos)
            for pos, slot in enumerate(CORNER_FACELETS)]


def extract_edges(state: CubeState) -> List[EdgePiece]:
    return [EdgePiece(tuple(state.get(f, i) for f, i in slot), pos)
            for pos, slot in enumerate(EDGE_FACELETS)]


def reference_corners(state: CubeState) -> List[Tuple[Color, ...]]:
    """Corner colors of the solved cube sharing this state's centers"""
    return [tuple(state.center(f) for f, _ in slot) for slot in CORNER_FACELETS]


def reference_edges(state: CubeState) -> List[Tuple[Color, ...]]:
    return [tuple(state.center(f) for f, _ in slot) for slot in EDGE_FACELETS]


def corner_orientation(colors, up_down) -> int:
    """Position of the up/down color in a corner triple, or -1 if it has none"""
    for index, color in enumerate(colors):
        if color in up_down:
            return index
    return -1


def identify_corners(state: CubeState) -> Tuple[List[int], List[int]]:
    """Match every corner slot to a solved corner by its colors.

    Returns ``(cp, co)``. Raises InvalidPieceColors for a slot whose colors
    no real corner carries (including mirror-image corners) and for a corner
    that shows up twice.
    """
    up_down = (state.center(U), state.center(D))
    lookup = {colors: pid for pid, colors in enumerate(reference_corners(state))}
    cp, co = [], []
    for corner in extract_corners(state):
        ori = corner_orientation(corner.colors, up_down)
        # read the colors clockwise starting from the up/down sticker
        turned = tuple(corner.colors[(ori + k) % 3] for k in range(3))
        pid = lookup.get(turned)
        if ori < 0 or pid is None or pid in cp:
            raise InvalidPieceColors(CORNER_NAMES[corner.position], corner.colors)
        cp.append(pid)
        co.append(ori)
    return cp, co


def identify_edges(state: CubeState) -> Tuple[List[int], List[int]]:
    """Match every edge slot to a solved edge by color set; returns ``(ep, eo)``"""
    reference = reference_edges(state)
    lookup = {frozenset(colors): pid for pid, colors in enumerate(reference)}
    ep, eo = [], []
    for edge in extract_edges(state):
        pid = lookup.get(frozenset(edge.colors))
        if pid is None or pid in ep:
            raise InvalidPieceColors(EDGE_NAMES[edge.position], edge.colors)
        ep.append(pid)
        eo.append(0 if edge.colors[0] == reference[pid][0] else 1)
    return ep, eo


def to_cubies(state: CubeState) -> CubieCube:
    cp, co = identify_corners(state)
    ep, eo = identify_edges(state)
    return CubieCube(tuple(cp), tuple(co), tuple(ep), tuple(eo))
