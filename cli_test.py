import json
import os

import pytest

import solve
from cube_core.move import parse_moves
from cube_core.solver import SolvePhase
from cube_core.state import Color, CubeState, Face
from cube_core.tables import TABLE_FILE
from cube_core.transition import apply_moves


def solution_from(out):
    """Moves printed on the ``Solution (N moves): ...`` line"""
    line = next(line for line in out.splitlines() if line.startswith("Solution"))
    return parse_moves(line.split(":", 1)[1])


# Solving Tests
def test_solve_state_string(capsys):
    state = apply_moves(CubeState(), "R U F' D2")
    assert solve.main(['--state', state.serialize()]) == 0
    out = capsys.readouterr().out
    assert apply_moves(state, solution_from(out)).is_solved()


def test_solve_net_file(tmp_path, capsys):
    state = apply_moves(CubeState(), "L2 B U'")
    path = tmp_path / "cube.txt"
    path.write_text(state.to_string())
    assert solve.main(['--net', str(path)]) == 0
    assert apply_moves(state, solution_from(capsys.readouterr().out)).is_solved()


def test_scramble_is_reproducible(capsys):
    """Same seed, same scramble and same solution"""
    assert solve.main(['--scramble', '15', '--seed', '3']) == 0
    first = capsys.readouterr().out
    assert solve.main(['--scramble', '15', '--seed', '3']) == 0
    assert capsys.readouterr().out == first

    scramble = parse_moves(first.splitlines()[0].split(":", 1)[1])
    assert len(scramble) == 15
    state = apply_moves(CubeState(), scramble)
    assert apply_moves(state, solution_from(first)).is_solved()


def test_explain(capsys):
    assert solve.main(['--scramble', '12', '--seed', '5', '--explain']) == 0
    lines = capsys.readouterr().out.splitlines()[1:]
    assert lines
    assert lines[0].startswith("  1. ")
    assert all("Rotate" in line for line in lines)
    assert all(any(line.endswith(f"({p.value})") for p in SolvePhase) for line in lines)


def test_distance(capsys):
    state = apply_moves(CubeState(), "U")
    assert solve.main(['--state', state.serialize(), '--distance']) == 0
    out = capsys.readouterr().out
    assert "Solution (1 moves): U'" in out
    assert "Kociemba distance: 1" in out


def test_table_dir(tmp_path, capsys):
    assert solve.main(['--state', CubeState().serialize(), '--table-dir', str(tmp_path)]) == 0
    assert "Solution (0 moves)" in capsys.readouterr().out
    assert os.path.exists(os.path.join(str(tmp_path), TABLE_FILE))


# Error Tests
def test_bad_state_string(capsys):
    assert solve.main(['--state', 'XYZ']) == 1
    assert "Not a 54-character facelet string" in capsys.readouterr().err


def test_illegal_state(capsys):
    twisted = CubeState().with_facelet(Face.UP, 8, Color.RED).with_facelet(
        Face.RIGHT, 0, Color.WHITE).with_facelet(Face.FRONT, 2, Color.BLUE)
    assert solve.main(['--state', twisted.serialize()]) == 1
    assert "Corner twist error" in capsys.readouterr().err


def test_bad_net_file(tmp_path, capsys):
    """Unknown colours and missing files exit cleanly"""
    path = tmp_path / "cube.txt"
    path.write_text(CubeState().to_string().replace("TOP(U): WWW", "TOP(U): WXW"))
    assert solve.main(['--net', str(path)]) == 1
    assert "Unknown color code" in capsys.readouterr().err

    assert solve.main(['--net', str(tmp_path / "missing.txt")]) == 1
    assert "Error:" in capsys.readouterr().err


def test_bad_config(tmp_path, capsys):
    path = tmp_path / "solver.json"
    path.write_text(json.dumps({'max_depth': 20}))
    assert solve.main(['--scramble', '5', '-c', str(path)]) == 1
    assert "Unknown solver config keys: max_depth" in capsys.readouterr().err


def test_negative_scramble():
    with pytest.raises(SystemExit):
        solve.main(['--scramble', '-1'])


if __name__ == "__main__":
    import sys
    sys.exit(pytest.main([__file__]))
