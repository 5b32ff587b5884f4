class CubeError(Exception):
    """Base class for every error raised by cube_core"""


class ValidationError(CubeError, ValueError):
    """Cube state is malformed or physically impossible"""


class InvalidFaceConfiguration(ValidationError):
    def __init__(self, message="Invalid face configuration. Each face must have exactly 9 stickers."):
        super().__init__(message)


class InvalidStickerCount(ValidationError):
    def __init__(self, color, count):
        self.color = color
        self.count = count
        amount = "many" if count > 9 else "few"
        super().__init__(
            f"You have too {amount} stickers of color {color.code}. Expected 9, found {count}."
        )


class NonUniqueCenters(ValidationError):
    def __init__(self):
        super().__init__("Center colors must all be unique.")


class PhysicalLegalityError(ValidationError):
    """Well-formed state that no sequence of face turns can reach"""


class InvalidPieceColors(PhysicalLegalityError):
    def __init__(self, slot, colors):
        self.slot = slot
        self.colors = tuple(colors)
        codes = ''.join(c.code for c in self.colors)
        super().__init__(f"Piece at {slot} has colors {codes}, which no real piece carries.")


class InvalidCornerOrientation(PhysicalLegalityError):
    def __init__(self):
        super().__init__(
            "Corner twist error: pattern impossible. "
            "The corner pieces cannot be oriented this way on a real cube."
        )


class InvalidEdgeOrientation(PhysicalLegalityError):
    def __init__(self):
        super().__init__(
            "Edge flip error: pattern impossible. "
            "The edge pieces cannot be flipped this way on a real cube."
        )


class InvalidPermutationParity(PhysicalLegalityError):
    def __init__(self):
        super().__init__(
            "Permutation parity invalid. The pieces cannot be arranged this way on a real cube."
        )


class InvalidNotation(CubeError, ValueError):
    def __init__(self, text):
        self.text = text
        super().__init__(f"Invalid move notation: {text!r}")


class OutOfRange(CubeError, IndexError):
    def __init__(self, index):
        self.index = index
        super().__init__(f"Facelet index {index!r} out of range 0-8")


class SolverError(CubeError, RuntimeError):
    """Solver tables or a produced solution broke an internal invariant"""
