from flask import current_app

from riddlescape.catalog import MAX_PUZZLE_SCORE, get_puzzle
from riddlescape.errors import NoActiveSessionError, SessionEndedError, ValidationError
from riddlescape.services.progress import ProgressStore
from riddlescape.services.puzzles import PuzzleOutcome, check_answer
from riddlescape.services.session import SessionController


class PuzzleCoordinator:
    """The only writer of the completion set and of stored progress records.

    Puzzle views get read access to the session and go through
    ``enter_puzzle``/``complete_puzzle``/``submit_answer`` for every change.
    """

    def __init__(self, session: SessionController, store: ProgressStore):
        self.session = session
        self.store = store

    @property
    def identity(self) -> str:
        return self.session.participant_name

    def _require_active(self) -> None:
        if not self.session.participant_name:
            raise NoActiveSessionError()
        if self.session.ended:
            raise SessionEndedError()

    def enter_puzzle(self, puzzle_id: str) -> dict:
        """Start a fresh attempt: every visit resets the stored record to zero."""
        self._require_active()
        puzzle = get_puzzle(puzzle_id)
        record = self.store._write(self.identity, puzzle.id, progress=0, score=0)
        current_app.logger.info(f"[puzzle-enter] user={self.identity} puzzle={puzzle.id}")
        return record

    def complete_puzzle(self, puzzle_id: str, score: int = MAX_PUZZLE_SCORE) -> dict:
        puzzle = get_puzzle(puzzle_id)
        if self.session.ended and self.session.completion.get(puzzle.id):
            # Repeat of the call that finished the run
            return self.store.load(self.identity)[puzzle.id]
        self._require_active()
        if isinstance(score, bool) or score not in (0, MAX_PUZZLE_SCORE):
            raise ValidationError(f'Score must be 0 or {MAX_PUZZLE_SCORE}.')
        record = self.store._write(self.identity, puzzle.id, progress=100, score=score)
        self.session.on_puzzle_solved(puzzle.id)
        current_app.logger.info(
            f"[puzzle-complete] user={self.identity} puzzle={puzzle.id} solved={self.session.solved_count()}"
            f"/{len(self.session.completion)} ended={self.session.ended}"
        )
        return record

    def submit_answer(self, puzzle_id: str, answer) -> PuzzleOutcome:
        self._require_active()
        outcome = check_answer(puzzle_id, answer)
        if outcome.solved:
            self.complete_puzzle(puzzle_id)
        return outcome

    def total_score(self) -> int:
        """Score of the current run: stored scores of the puzzles it marked complete.

        Rows written by an earlier run under the same name do not count.
        """
        if not self.identity:
            return 0
        records = self.store.load(self.identity)
        completion = self.session.snapshot()['completion']
        return sum(records[pid]['score'] for pid, done in completion.items() if done)
