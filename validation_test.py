import random

import numpy as np
import pytest

from cube_core.errors import (
    InvalidCornerOrientation, InvalidEdgeOrientation, InvalidFaceConfiguration,
    InvalidPermutationParity, InvalidPieceColors, InvalidStickerCount,
    NonUniqueCenters, PhysicalLegalityError, ValidationError,
)
from cube_core.pieces import CORNER_FACELETS, EDGE_FACELETS, SOLVED_CUBIE, to_cubies
from cube_core.scramble import generate_scramble
from cube_core.state import Color, CubeState, Face
from cube_core.transition import apply_moves
from cube_core.validation import (
    is_valid, permutation_parity, validate, validate_basic, validate_physical_legality,
)

U, D, L, R, F, B = Face.UP, Face.DOWN, Face.LEFT, Face.RIGHT, Face.FRONT, Face.BACK


def recolor(state, *changes):
    for face, index, color in changes:
        state = state.with_facelet(face, index, color)
    return state


# Accepted States
def test_validator_accepts_solved():
    validate(CubeState())
    assert is_valid(CubeState())
    assert to_cubies(CubeState()) == SOLVED_CUBIE


def test_validator_accepts_scrambled():
    """Any state reached by face turns passes every check"""
    rng = random.Random(5)
    for n in range(60):
        state = apply_moves(CubeState(), generate_scramble(n, rng))
        validate(state)
        assert is_valid(state)


def test_piece_tables():
    corner_slots = [fi for slot in CORNER_FACELETS for fi in slot]
    edge_slots = [fi for slot in EDGE_FACELETS for fi in slot]
    assert len(set(corner_slots)) == 24
    assert len(set(edge_slots)) == 24
    assert not set(corner_slots) & set(edge_slots)


# Structural Errors
def test_sticker_count():
    """Validator rejects malformed counts"""
    state = CubeState().with_facelet(U, 0, Color.YELLOW)
    with pytest.raises(InvalidStickerCount) as e:
        validate_basic(state)
    assert e.value.color == Color.WHITE
    assert e.value.count == 8
    assert str(e.value) == "You have too few stickers of color W. Expected 9, found 8."

    state = CubeState().with_facelet(D, 0, Color.WHITE)
    with pytest.raises(InvalidStickerCount) as e:
        validate(state)
    assert "too many stickers of color W" in str(e.value)
    assert not is_valid(state)


def test_non_unique_centers():
    state = recolor(CubeState(), (U, 4, Color.YELLOW), (D, 0, Color.WHITE))
    with pytest.raises(NonUniqueCenters):
        validate(state)


def test_bad_shape_and_values():
    with pytest.raises(InvalidFaceConfiguration):
        validate(CubeState(np.zeros((6, 9))))

    facelets = CubeState().state.copy()
    facelets[0, 0, 0] = 7
    with pytest.raises(InvalidFaceConfiguration):
        validate(CubeState(facelets))


# Physical Errors
def test_twisted_corner():
    # URF corner turned in place
    state = recolor(CubeState(), (U, 8, Color.RED), (R, 0, Color.WHITE), (F, 2, Color.BLUE))
    validate_basic(state)
    with pytest.raises(InvalidCornerOrientation):
        validate(state)


def test_flipped_edge():
    state = recolor(CubeState(), (U, 7, Color.RED), (F, 1, Color.WHITE))
    with pytest.raises(InvalidEdgeOrientation):
        validate(state)


def test_swapped_edges():
    # UF and UR exchanged, nothing else moved
    state = recolor(CubeState(), (F, 1, Color.BLUE), (R, 1, Color.RED))
    with pytest.raises(InvalidPermutationParity):
        validate(state)


def test_swapped_edges_and_corners():
    """Two swaps together are a legal state (a T-perm-like pattern)"""
    state = apply_moves(CubeState(), "R U R' U' R' F R2 U' R' U' R U R' F'")
    validate(state)
    assert not state.is_solved()


def test_impossible_piece():
    # UF edge carrying white and yellow
    state = recolor(CubeState(), (F, 1, Color.YELLOW), (D, 1, Color.RED))
    validate_basic(state)
    with pytest.raises(InvalidPieceColors) as e:
        validate_physical_legality(state)
    assert e.value.slot == 'UF'
    assert isinstance(e.value, PhysicalLegalityError)
    assert isinstance(e.value, ValueError)


def test_errors_are_validation_errors():
    state = recolor(CubeState(), (U, 7, Color.RED), (F, 1, Color.WHITE))
    with pytest.raises(ValidationError):
        validate(state)
    assert not is_valid(state)


def test_permutation_parity():
    assert permutation_parity(range(8)) == 0
    assert permutation_parity([1, 0, 2, 3]) == 1
    assert permutation_parity([1, 2, 0]) == 0
    assert permutation_parity([1, 0, 3, 2]) == 0


if __name__ == "__main__":
    import sys
    sys.exit(pytest.main([__file__]))
