"""Answer checkers for the catalog puzzles.

Each checker takes the raw answer posted by the browser and returns a
``PuzzleOutcome``. Bad input raises ``ValidationError``; that error belongs
to the puzzle alone and must not reach the session or the progress store.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Tuple

from riddlescape.catalog import get_puzzle
from riddlescape.errors import UnknownPuzzleError, ValidationError
from riddlescape.services.expression import MAX_EXPRESSION_LENGTH, ExpressionError, evaluate


@dataclass
class PuzzleOutcome:
    solved: bool
    message: str
    progress: int = 0
    details: dict = field(default_factory=dict)

    def to_dict(self):
        return {
            'solved': self.solved,
            'message': self.message,
            'progress': self.progress,
            **self.details,
        }


# ---- Broken Calculator ----

CALC_TARGET = 42
CALC_WORKING_KEYS = frozenset('125+-*')
CALC_BROKEN_KEYS = frozenset('3467890/')


def check_broken_calc(answer) -> PuzzleOutcome:
    expression = (answer if isinstance(answer, str) else '').replace(' ', '')
    if not expression:
        raise ValidationError('Expression cannot be empty.')
    broken = sorted(set(expression) & CALC_BROKEN_KEYS)
    if broken:
        raise ValidationError(f"Those keys are broken: {' '.join(broken)}")
    if set(expression) - CALC_WORKING_KEYS:
        raise ExpressionError()
    if len(expression) > MAX_EXPRESSION_LENGTH:
        raise ValidationError(f'The display holds at most {MAX_EXPRESSION_LENGTH} keys.')
    progress = min(99, len(expression) * 10)
    try:
        result = evaluate(expression)
    except ExpressionError:
        return PuzzleOutcome(False, 'Invalid expression! Check your syntax.', progress, {'result': 'ERROR'})
    if result == CALC_TARGET:
        return PuzzleOutcome(True, f'Success! {expression} = {result}. Puzzle solved!', 100, {'result': result})
    return PuzzleOutcome(False, f'Result: {result}. Try again! Target is {CALC_TARGET}.', progress, {'result': result})


# ---- Painted Cube ----

CUBE_SIZE = 5
# Edge cubes minus corners: 12 edges of (n - 2) blocks
CUBE_ANSWER = 12 * (CUBE_SIZE - 2)


def check_painted_cube(answer) -> PuzzleOutcome:
    try:
        guess = int(str(answer).strip())
    except (TypeError, ValueError):
        raise ValidationError('Please enter a valid number.')
    if guess == CUBE_ANSWER:
        return PuzzleOutcome(True, f'SUCCESS! You found {guess} blocks.', 100)
    progress = max(0, min(99, guess * 100 // CUBE_ANSWER))
    return PuzzleOutcome(False, f'Incorrect guess ({guess}). Try again!', progress)


# ---- Invisible Maze ----

# S start, G goal, # wall. Walls are never sent to the browser.
MAZE = (
    "S..#.",
    "##.#.",
    ".....",
    ".###.",
    "...#G",
)
MAZE_MAX_STRIKES = 5
_MOVES: Dict[str, Tuple[int, int]] = {
    'U': (-1, 0), 'W': (-1, 0),
    'D': (1, 0), 'S': (1, 0),
    'L': (0, -1), 'A': (0, -1),
    'R': (0, 1),
}


def _find(symbol: str) -> Tuple[int, int]:
    for r, row in enumerate(MAZE):
        c = row.find(symbol)
        if c >= 0:
            return r, c
    raise ValueError(symbol)


MAZE_START = _find('S')
MAZE_GOAL = _find('G')


def _is_open(row: int, col: int) -> bool:
    return 0 <= row < len(MAZE) and 0 <= col < len(MAZE[row]) and MAZE[row][col] != '#'


def _is_checkpoint(row: int, col: int) -> bool:
    return row % 2 == 0 and col % 2 == 0


def _maze_progress(pos: Tuple[int, int]) -> int:
    total = abs(MAZE_GOAL[0] - MAZE_START[0]) + abs(MAZE_GOAL[1] - MAZE_START[1])
    left = abs(MAZE_GOAL[0] - pos[0]) + abs(MAZE_GOAL[1] - pos[1])
    return min(99, int((total - left) / total * 100))


def check_invisible_maze(answer) -> PuzzleOutcome:
    moves = answer.get('moves') if isinstance(answer, dict) else answer
    if not isinstance(moves, str) or not moves.strip():
        raise ValidationError('Use WASD or Arrow Keys to move.')
    moves = moves.strip().upper()
    unknown = set(moves) - set(_MOVES)
    if unknown:
        raise ValidationError(f"Unknown moves: {' '.join(sorted(unknown))}")

    pos = MAZE_START
    checkpoint = MAZE_START
    strikes = 0
    resets = 0
    for step in moves:
        dr, dc = _MOVES[step]
        nxt = (pos[0] + dr, pos[1] + dc)
        if not _is_open(*nxt):
            strikes += 1
            if strikes >= MAZE_MAX_STRIKES:
                pos = checkpoint
                strikes = 0
                resets += 1
            continue
        pos = nxt
        if pos == MAZE_GOAL:
            return PuzzleOutcome(True, 'SUCCESS! You reached the goal.', 100,
                                 {'position': list(pos), 'strikes': strikes})
        if _is_checkpoint(*pos):
            checkpoint = pos
            strikes = 0

    details = {'position': list(pos), 'checkpoint': list(checkpoint), 'strikes': strikes}
    if resets:
        message = f'{MAZE_MAX_STRIKES} Strikes! Returning to last checkpoint.'
    else:
        message = f'Strikes: {strikes}/{MAZE_MAX_STRIKES}. Keep moving.'
    return PuzzleOutcome(False, message, _maze_progress(pos), details)


# ---- Mirror Typing ----

MIRROR_ANSWER = 'OHCE'


def check_mirror_typing(answer) -> PuzzleOutcome:
    typed = (answer if isinstance(answer, str) else '').upper()
    if not typed:
        raise ValidationError('Type the reversed answer to the riddle.')
    mirrored = typed[::-1]
    if typed == MIRROR_ANSWER:
        return PuzzleOutcome(True, 'SUCCESS! Answer: ECHO. Proceed to the next step!', 100, {'displayed': mirrored})
    progress = int(min(99, len(typed) / len(MIRROR_ANSWER) * 100))
    return PuzzleOutcome(False, f'Incorrect. The displayed text is: {mirrored}. Keep trying!', progress,
                         {'displayed': mirrored})


# ---- Seating Arrangement ----

# C A B E D, left to right
SEATING_ANSWER = 'CAROL'


def check_seating_arrangement(answer) -> PuzzleOutcome:
    name = (answer if isinstance(answer, str) else '').strip().upper()
    if not name:
        raise ValidationError('Type the name of the person sitting at the far left.')
    if name == SEATING_ANSWER:
        return PuzzleOutcome(True, 'SUCCESS! The far-left person is Carol.', 100)
    return PuzzleOutcome(False, 'Incorrect name entered. Review the clues carefully!', 50)


CHECKERS: Dict[str, Callable[[object], PuzzleOutcome]] = {
    'broken-calc': check_broken_calc,
    'painted-cube': check_painted_cube,
    'invisible-maze': check_invisible_maze,
    'mirror-typing': check_mirror_typing,
    'seating-arrangement': check_seating_arrangement,
}


def check_answer(puzzle_id: str, answer) -> PuzzleOutcome:
    puzzle = get_puzzle(puzzle_id)
    checker: Optional[Callable] = CHECKERS.get(puzzle.id)
    if checker is None:
        raise UnknownPuzzleError(f'No checker for puzzle: {puzzle_id}')
    outcome = checker(answer)
    if outcome.solved:
        outcome.details['code'] = puzzle.reveals
    return outcome
