import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List

from .errors import InvalidNotation
from .state import Face

NOTATION = re.compile(r"([UDLRFB])(['2]?)")

FACE_WORDS = {
    Face.UP: 'top', Face.DOWN: 'bottom', Face.LEFT: 'left',
    Face.RIGHT: 'right', Face.FRONT: 'front', Face.BACK: 'back',
}


class Amount(Enum):
    CLOCKWISE = ''
    COUNTERCLOCKWISE = "'"
    DOUBLE = '2'

    @property
    def quarters(self) -> int:
        """Number of clockwise quarter turns this amount stands for"""
        return {'': 1, '2': 2, "'": 3}[self.value]

    @property
    def direction(self) -> str:
        return {'': 'clockwise', "'": 'counter-clockwise', '2': '180 degrees'}[self.value]

    @classmethod
    def from_quarters(cls, quarters: int) -> 'Amount':
        quarters %= 4
        if quarters == 0:
            raise ValueError("A multiple of four quarter turns is not a move")
        return {1: cls.CLOCKWISE, 2: cls.DOUBLE, 3: cls.COUNTERCLOCKWISE}[quarters]


@dataclass(frozen=True)
class Move:
    face: Face
    amount: Amount = Amount.CLOCKWISE

    @classmethod
    def parse(cls, text: str) -> 'Move':
        """Parse Singmaster notation such as ``R``, ``U'`` or ``F2``"""
        if not isinstance(text, str):
            raise InvalidNotation(text)
        m = NOTATION.fullmatch(text)
        if not m:
            raise InvalidNotation(text)
        return cls(Face.from_letter(m.group(1)), Amount(m.group(2)))

    @property
    def notation(self) -> str:
        return self.face.letter + self.amount.value

    @property
    def quarters(self) -> int:
        return self.amount.quarters

    @property
    def description(self) -> str:
        return f"Rotate {FACE_WORDS[self.face]} face {self.amount.direction}"

    def inverse(self) -> 'Move':
        return Move(self.face, Amount.from_quarters(4 - self.quarters))

    def __str__(self):
        return self.notation


ALL_MOVES = [Move(face, amount) for face in Face
             for amount in (Amount.CLOCKWISE, Amount.DOUBLE, Amount.COUNTERCLOCKWISE)]


def parse_moves(text: str) -> List[Move]:
    """Parse "U R' F2 D" into moves; any malformed token raises InvalidNotation"""
    return [Move.parse(token) for token in text.replace("’", "'").split()]


def format_moves(moves: Iterable[Move]) -> str:
    return ' '.join(m.notation for m in moves)


def validate_moves(moves) -> bool:
    """Check if all tokens are valid Singmaster notation"""
    return all(isinstance(m, str) and NOTATION.fullmatch(m) for m in moves)


def invert_moves(moves: Iterable[Move]) -> List[Move]:
    return [m.inverse() for m in reversed(list(moves))]


def normalize_moves(moves: Iterable[Move]) -> List[Move]:
    """Remove redundant moves like R R' or R R R R"""
    result = []
    for move in moves:
        if result and result[-1].face == move.face:
            # Same face as previous move
            prev = result.pop()
            combined = _combine_moves(prev, move)
            if combined:
                result.append(combined)
        else:
            result.append(move)
    return result


def _combine_moves(m1: Move, m2: Move):
    """Combine two moves on same face"""
    total = (m1.quarters + m2.quarters) % 4
    if total == 0:
        return None
    return Move(m1.face, Amount.from_quarters(total))
