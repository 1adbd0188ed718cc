import threading
import time
from typing import Callable, Dict, Iterable, Optional

from riddlescape.catalog import puzzle_ids
from riddlescape.errors import UnknownPuzzleError, ValidationError

HOME_ROUTE = '/'


def format_time(total_seconds: int) -> str:
    total_seconds = max(0, int(total_seconds))
    minutes, seconds = divmod(total_seconds, 60)
    return f'{minutes:02d}:{seconds:02d}'


class SessionController:
    """One timed run through the puzzle catalog for one browser.

    Lifecycle: idle -> running (``start``) -> ended (timeout or all puzzles
    solved) -> idle (``reset``). Once ended, nothing but ``reset``/``start``
    changes the remaining time, the running flag or the completion set.
    ``generation`` moves on every start/reset so tick sources scheduled for
    an older run can tell they are stale.
    """

    def __init__(self, catalog: Optional[Iterable[str]] = None, max_seconds: int = 900,
                 clock: Callable[[], float] = time.time, critical_seconds: int = 60):
        self.catalog = tuple(catalog) if catalog is not None else puzzle_ids()
        self.max_seconds = int(max_seconds)
        self.critical_seconds = int(critical_seconds)
        self._clock = clock
        self._lock = threading.RLock()
        self.generation = 0
        self.reset()

    def reset(self) -> None:
        with self._lock:
            self.generation += 1
            self.participant_name: Optional[str] = None
            self.remaining_seconds = self.max_seconds
            self.running = False
            self.ended = False
            self.end_reason: Optional[str] = None
            self.started_at: Optional[float] = None
            self.redirect: Optional[str] = None
            self.completion: Dict[str, bool] = {pid: False for pid in self.catalog}
            self._final_elapsed: Optional[int] = None

    def start(self, participant_name) -> None:
        name = participant_name.strip() if isinstance(participant_name, str) else ''
        if not name:
            raise ValidationError('Please enter your name.')
        with self._lock:
            self.reset()
            self.participant_name = name
            self.running = True
            self.started_at = self._clock()

    @property
    def is_active(self) -> bool:
        return bool(self.participant_name) and not self.ended

    def tick(self, generation: Optional[int] = None) -> bool:
        """Advance the countdown by one second.

        Returns False when idle, ended, or when ``generation`` names an
        earlier run than the current one.
        """
        with self._lock:
            if generation is not None and generation != self.generation:
                return False
            if not self.running or self.ended:
                return False
            self.remaining_seconds = max(0, self.remaining_seconds - 1)
            if self.remaining_seconds == 0:
                self._finish('timeout', self.max_seconds)
                self.redirect = HOME_ROUTE
            return True

    def on_puzzle_solved(self, puzzle_id: str) -> bool:
        if puzzle_id not in self.completion:
            raise UnknownPuzzleError(f'Unknown puzzle: {puzzle_id}')
        with self._lock:
            if self.ended or not self.running:
                return False
            self.completion[puzzle_id] = True
            if all(self.completion.values()):
                wall = int(self._clock() - self.started_at) if self.started_at is not None else 0
                self._finish('completed', min(self.max_seconds, max(0, wall)))
            return True

    def _finish(self, reason: str, elapsed: int) -> None:
        self.ended = True
        self.running = False
        self.end_reason = reason
        self._final_elapsed = elapsed

    def elapsed_seconds(self) -> int:
        with self._lock:
            if self.ended and self._final_elapsed is not None:
                return self._final_elapsed
            if self.started_at is None:
                return 0
            return self.max_seconds - self.remaining_seconds

    def elapsed_formatted(self) -> str:
        return format_time(self.elapsed_seconds())

    def solved_count(self) -> int:
        return sum(1 for done in self.completion.values() if done)

    def snapshot(self) -> dict:
        with self._lock:
            return {
                'username': self.participant_name,
                'remaining': self.remaining_seconds,
                'remainingFormatted': format_time(self.remaining_seconds),
                'running': self.running,
                'ended': self.ended,
                'endReason': self.end_reason,
                'elapsed': self.elapsed_seconds(),
                'elapsedFormatted': self.elapsed_formatted(),
                'completion': dict(self.completion),
                'solved': self.solved_count(),
                'critical': self.running and self.remaining_seconds <= self.critical_seconds,
                'redirect': self.redirect,
            }


class SessionRegistry:
    """Browser identity -> SessionController."""

    def __init__(self):
        self._sessions: Dict[str, SessionController] = {}
        self._lock = threading.Lock()

    def get(self, identity: str, max_seconds: int = 900, critical_seconds: int = 60) -> SessionController:
        with self._lock:
            controller = self._sessions.get(identity)
            if controller is None:
                controller = SessionController(max_seconds=max_seconds, critical_seconds=critical_seconds)
                self._sessions[identity] = controller
            return controller

    def peek(self, identity: str) -> Optional[SessionController]:
        return self._sessions.get(identity)

    def drop(self, identity: str) -> None:
        with self._lock:
            self._sessions.pop(identity, None)

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()


sessions = SessionRegistry()
