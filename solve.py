import argparse
import logging
import random
import sys
from dataclasses import replace

from cube_core.config import SolverConfig
from cube_core.errors import CubeError
from cube_core.move import format_moves
from cube_core.scramble import scramble_state
from cube_core.solver import CubeSolver, phase_lengths
from cube_core.state import CubeState

logger = logging.getLogger('solve')

parser = argparse.ArgumentParser(
    description="Solve a 3x3x3 cube",
    epilog="The first solve in a process builds the solver tables (a second or two). "
           "Set --table-dir or CUBE_CORE_TABLE_DIR to keep them on disk between runs.")
source = parser.add_mutually_exclusive_group(required=True)
source.add_argument('--state', help="54-character facelet string, faces in U D L R F B order")
source.add_argument('--net', help="file holding the net text written by CubeState.to_string")
source.add_argument('--scramble', type=int, metavar='N', help="solve a random N-move scramble")
parser.add_argument('--seed', type=int, help="random seed for --scramble")
parser.add_argument('-c', '--config', help="JSON solver config")
parser.add_argument('--table-dir', help="directory caching the solver tables; overrides the config")
parser.add_argument('--explain', action='store_true', help="print one line per move with its phase")
parser.add_argument('--distance', action='store_true', help="also print the kociemba solution length")
parser.add_argument('-v', '--verbose', action='store_true')


def load_state(args):
    if args.state is not None:
        state = CubeState.deserialize(args.state)
        if state is None:
            raise CubeError(f"Not a 54-character facelet string: {args.state!r}")
        return state
    if args.net is not None:
        with open(args.net) as f:
            return CubeState.from_string(f.read())
    state, moves = scramble_state(args.scramble, random.Random(args.seed))
    print(f"Scramble: {format_moves(moves)}")
    return state


def main(argv=None):
    args = parser.parse_args(argv)
    if args.scramble is not None and args.scramble < 0:
        parser.error("--scramble must not be negative")
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format='%(asctime)s %(name)s %(levelname)s %(message)s')

    try:
        config = SolverConfig.from_json(args.config) if args.config else SolverConfig()
        if args.table_dir:
            config = replace(config, table_dir=args.table_dir)
        solver = CubeSolver(config)
        state = load_state(args)
        if args.explain:
            steps = solver.solve_with_explanations(state)
            for i, step in enumerate(steps, 1):
                print(f"{i:3d}. {step.move.notation:<3} {step.description} ({step.phase.value})")
            for phase, n in phase_lengths(steps).items():
                logger.info("%s: %d moves", phase.value, n)
        else:
            moves = solver.solve(state)
            print(f"Solution ({len(moves)} moves): {format_moves(moves)}")
        if args.distance:
            print(f"Kociemba distance: {solver.distance(state)}")
    except (CubeError, OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
