import re
from enum import IntEnum
from typing import Dict, Mapping, Optional, Tuple

import numpy as np

from .errors import InvalidFaceConfiguration, OutOfRange


class Color(IntEnum):
    WHITE = 0
    YELLOW = 1
    RED = 2
    ORANGE = 3
    BLUE = 4
    GREEN = 5

    @property
    def code(self) -> str:
        return COLOR_CHARS[self]

    @classmethod
    def from_code(cls, code: str) -> 'Color':
        if len(code) != 1 or code not in COLOR_CHARS:
            raise ValueError(f"Unknown color code: {code!r}")
        return cls(COLOR_CHARS.index(code))


class Face(IntEnum):
    UP = 0
    DOWN = 1
    LEFT = 2
    RIGHT = 3
    FRONT = 4
    BACK = 5

    @property
    def opposite(self) -> 'Face':
        # opposite faces are paired as (0, 1), (2, 3), (4, 5)
        return Face(self ^ 1)

    @property
    def letter(self) -> str:
        return FACE_LETTERS[self]

    @classmethod
    def from_letter(cls, letter: str) -> 'Face':
        if len(letter) != 1 or letter not in FACE_LETTERS:
            raise ValueError(f"Unknown face letter: {letter!r}")
        return cls(FACE_LETTERS.index(letter))


COLOR_CHARS = 'WYROBG'
FACE_LETTERS = 'UDLRFB'
FACE_NAMES = {
    Face.UP: 'TOP', Face.DOWN: 'BOTTOM', Face.LEFT: 'LEFT',
    Face.RIGHT: 'RIGHT', Face.FRONT: 'FRONT', Face.BACK: 'BACK',
}

SOLVED_COLORS = {
    Face.UP: Color.WHITE,
    Face.DOWN: Color.YELLOW,
    Face.LEFT: Color.GREEN,
    Face.RIGHT: Color.BLUE,
    Face.FRONT: Color.RED,
    Face.BACK: Color.ORANGE,
}


def _as_color(value) -> Color:
    if isinstance(value, str):
        return Color.from_code(value)
    return Color(value)


def _as_face(value) -> Face:
    if isinstance(value, str):
        return Face.from_letter(value)
    return Face(value)


def _check_index(index) -> int:
    if isinstance(index, bool) or not isinstance(index, (int, np.integer)) or not 0 <= index <= 8:
        raise OutOfRange(index)
    return int(index)


class CubeState:
    """Immutable 54-facelet cube state.

    Facelets live in a read-only numpy array of shape (6, 3, 3) indexed by
    ``Face``; each face is stored row-major as seen on the unfolded net, so
    flat index 0 is the top-left sticker, 4 the center and 8 the bottom-right.
    """

    def __init__(self, facelets=None):
        if facelets is None:
            facelets = np.array([[[SOLVED_COLORS[f]] * 3] * 3 for f in Face], dtype=np.int8)
        else:
            facelets = np.array(facelets, dtype=np.int8)
        facelets.setflags(write=False)
        self.state = facelets

    @classmethod
    def solved(cls) -> 'CubeState':
        return cls()

    @classmethod
    def from_faces(cls, faces: Mapping) -> 'CubeState':
        """Build a state from a mapping of face -> 9 colors.

        Keys may be ``Face`` members or face letters, values sequences of
        ``Color`` members or color letters.
        """
        grid = {}
        for key, stickers in faces.items():
            stickers = list(stickers)
            if len(stickers) != 9:
                raise InvalidFaceConfiguration()
            try:
                grid[_as_face(key)] = [_as_color(c) for c in stickers]
            except ValueError as e:
                raise InvalidFaceConfiguration(f"Invalid face configuration. {e}.") from e
        if set(grid) != set(Face):
            raise InvalidFaceConfiguration()
        return cls(np.array([grid[f] for f in Face], dtype=np.int8).reshape(6, 3, 3))

    # Facelet access

    def get(self, face, index) -> Color:
        index = _check_index(index)
        return Color(int(self.state[_as_face(face)].flat[index]))

    def with_facelet(self, face, index, color) -> 'CubeState':
        """Return a copy with one sticker recolored, leaving every other facelet alone"""
        index = _check_index(index)
        facelets = self.state.copy()
        facelets[_as_face(face)].flat[index] = _as_color(color)
        return CubeState(facelets)

    def center(self, face) -> Color:
        return Color(int(self.state[_as_face(face), 1, 1]))

    def face(self, face) -> Tuple[Color, ...]:
        return tuple(Color(int(c)) for c in self.state[_as_face(face)].flat)

    @property
    def faces(self) -> Dict[Face, Tuple[Color, ...]]:
        return {f: self.face(f) for f in Face}

    def centers(self) -> Dict[Face, Color]:
        return {f: self.center(f) for f in Face}

    def is_solved(self) -> bool:
        return all(np.all(self.state[i] == self.state[i, 1, 1]) for i in range(6))

    # Boundary formats

    def serialize(self) -> str:
        """54-character string, faces in U D L R F B order"""
        return ''.join(COLOR_CHARS[c] for c in self.state.flat)

    @classmethod
    def deserialize(cls, text: str) -> Optional['CubeState']:
        if not isinstance(text, str) or len(text) != 54:
            return None
        if any(ch not in COLOR_CHARS for ch in text):
            return None
        values = [COLOR_CHARS.index(ch) for ch in text]
        return cls(np.array(values, dtype=np.int8).reshape(6, 3, 3))

    @classmethod
    def from_string(cls, s: str) -> 'CubeState':
        """Parse the net text produced by ``to_string``"""
        faces = {}
        pattern = r'(TOP|BOTTOM|LEFT|RIGHT|FRONT|BACK)\(([UDLRFB])\):\s*(\w{3})/(\w{3})/(\w{3})'
        for m in re.finditer(pattern, s):
            faces[m.group(2)] = m.group(3) + m.group(4) + m.group(5)
        return cls.from_faces(faces)

    def to_string(self) -> str:
        lines = []
        for face in Face:
            rows = [''.join(COLOR_CHARS[c] for c in row) for row in self.state[face]]
            lines.append(f"{FACE_NAMES[face]}({face.letter}): {'/'.join(rows)}")
        return '\n'.join(lines)

    def to_kociemba(self) -> str:
        """Convert for the kociemba solver: U R F D L B order, colors as face letters"""
        by_color = {self.center(f): f.letter for f in Face}
        order = [Face.UP, Face.RIGHT, Face.FRONT, Face.DOWN, Face.LEFT, Face.BACK]
        return ''.join(by_color[Color(int(c))] for f in order for c in self.state[f].flat)

    def __eq__(self, other):
        if not isinstance(other, CubeState):
            return NotImplemented
        return np.array_equal(self.state, other.state)

    def __hash__(self):
        return hash(self.state.tobytes())

    def __repr__(self):
        return f"CubeState({self.serialize()!r})"


def serialize(state: CubeState) -> str:
    return state.serialize()


def deserialize(text: str) -> Optional[CubeState]:
    return CubeState.deserialize(text)


def color_counts(state: CubeState) -> Dict[Color, int]:
    counts = np.bincount(state.state.ravel().astype(np.int64), minlength=len(Color))
    return {c: int(counts[c]) for c in Color}
