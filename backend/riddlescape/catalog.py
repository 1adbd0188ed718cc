from dataclasses import dataclass
from typing import Dict, Tuple

from riddlescape.errors import UnknownPuzzleError


@dataclass(frozen=True)
class Puzzle:
    id: str
    title: str
    route: str
    access_code: str  # code that unlocks this puzzle
    reveals: str      # code shown on the success screen


# Ordered: each puzzle reveals the code that unlocks the next one.
CATALOG: Tuple[Puzzle, ...] = (
    Puzzle('broken-calc', 'Broken Calculator', '/broken-calc', 'CALCFAIL', 'BETA'),
    Puzzle('painted-cube', 'Painted Cube Challenge', '/painted-cube', 'BETA', 'JET2MAZE'),
    Puzzle('invisible-maze', 'Invisible Maze', '/invisible-maze', 'JET2MAZE', 'R3V3RB'),
    Puzzle('mirror-typing', 'Mirror Typing', '/mirror-typing', 'R3V3RB', 'SEATS4U'),
    Puzzle('seating-arrangement', 'Seating Arrangement', '/seating-arrangement', 'SEATS4U', 'RIDDLE-MASTER-5'),
)

MAX_PUZZLE_SCORE = 100

_BY_ID: Dict[str, Puzzle] = {p.id: p for p in CATALOG}


def puzzle_ids() -> Tuple[str, ...]:
    return tuple(p.id for p in CATALOG)


def is_known(puzzle_id) -> bool:
    return isinstance(puzzle_id, str) and puzzle_id in _BY_ID


def get_puzzle(puzzle_id: str) -> Puzzle:
    try:
        return _BY_ID[puzzle_id]
    except (KeyError, TypeError):
        raise UnknownPuzzleError(f'Unknown puzzle: {puzzle_id}')


def initial_progress() -> Dict[str, dict]:
    """Fresh ProgressRecord for every catalog puzzle, in catalog order."""
    return {p.id: {'title': p.title, 'progress': 0, 'score': 0} for p in CATALOG}


def max_total_score() -> int:
    return len(CATALOG) * MAX_PUZZLE_SCORE
