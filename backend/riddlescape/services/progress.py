from typing import Dict

from riddlescape import db
from riddlescape.catalog import get_puzzle, initial_progress, max_total_score, puzzle_ids
from riddlescape.models import ProgressEntry, progress_key


class ProgressStore:
    """Persisted ProgressRecord per (participant, puzzle).

    Readers call ``load``/``total_score``; only the coordinator writes.
    """

    def load(self, identity: str) -> Dict[str, dict]:
        merged = initial_progress()
        rows = ProgressEntry.query.filter_by(participant_key=progress_key(identity)).all()
        for row in rows:
            # Rows for puzzles dropped from the catalog are ignored
            if row.puzzle_id in merged:
                merged[row.puzzle_id] = row.to_dict()
        return merged

    def total_score(self, identity: str) -> int:
        records = self.load(identity)
        return sum(int(records[pid].get('score') or 0) for pid in puzzle_ids())

    def overall_progress(self, identity: str) -> float:
        return self.total_score(identity) / max_total_score() * 100

    def _write(self, identity: str, puzzle_id: str, progress: int, score: int) -> dict:
        puzzle = get_puzzle(puzzle_id)
        key = progress_key(identity)
        entry = ProgressEntry.query.filter_by(participant_key=key, puzzle_id=puzzle.id).first()
        if entry is None:
            entry = ProgressEntry(participant_key=key, puzzle_id=puzzle.id, title=puzzle.title)
        entry.title = puzzle.title
        entry.progress = max(0, min(100, int(progress)))
        entry.score = int(score)
        try:
            db.session.add(entry)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        return entry.to_dict()


store = ProgressStore()
