from datetime import datetime, timezone

from riddlescape import db


def progress_key(identity: str) -> str:
    """Storage key for one participant, same shape the browser used."""
    return f'riddlescapeProgress_{identity}'


def _utcnow():
    return datetime.now(timezone.utc)


class ProgressEntry(db.Model):
    __tablename__ = 'progress_entry'
    __table_args__ = (
        db.UniqueConstraint('participant_key', 'puzzle_id', name='uq_progress_participant_puzzle'),
    )
    id = db.Column(db.Integer, primary_key=True)
    participant_key = db.Column(db.String(128), nullable=False, index=True)
    puzzle_id = db.Column(db.String(64), nullable=False)
    title = db.Column(db.String(128), nullable=False)
    progress = db.Column(db.Integer, default=0, nullable=False)
    score = db.Column(db.Integer, default=0, nullable=False)
    updated_at = db.Column(db.DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    def to_dict(self):
        return {
            'title': self.title,
            'progress': self.progress,
            'score': self.score,
        }
