import threading
from datetime import datetime, timezone
from typing import List, Optional

from riddlescape.errors import ValidationError

MISSING_DATA = 'Missing submission data.'


def _time_to_seconds(total_time: str) -> int:
    try:
        minutes, seconds = str(total_time).split(':', 1)
        return int(minutes) * 60 + int(seconds)
    except ValueError:
        return 0


class ScoreLedger:
    """Append-only list of completion records.

    Records live in process memory only and are gone after a restart.
    """

    def __init__(self):
        self._records: List[dict] = []
        self._lock = threading.Lock()

    def append(self, username, total_time, final_score) -> dict:
        # finalScore of 0 is a real score; only absent/null is missing
        if not username or not total_time or final_score is None:
            raise ValidationError(MISSING_DATA)
        if isinstance(final_score, bool) or not isinstance(final_score, (int, float)):
            raise ValidationError('finalScore must be a number.')

        record = {
            'username': username,
            'finalScore': final_score,
            'totalTime': total_time,
            'timestamp': datetime.now(timezone.utc).isoformat(),
        }
        with self._lock:
            self._records.append(record)
        return dict(record)

    def records(self) -> List[dict]:
        with self._lock:
            return [dict(r) for r in self._records]

    def leaderboard(self, limit: Optional[int] = None) -> List[dict]:
        """Highest score first, then fastest time, then earliest submission."""
        ranked = sorted(
            enumerate(self.records()),
            key=lambda pair: (-pair[1]['finalScore'], _time_to_seconds(pair[1]['totalTime']), pair[0]),
        )
        rows = [rec for _, rec in ranked]
        return rows[:limit] if limit and limit > 0 else rows

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


ledger = ScoreLedger()
