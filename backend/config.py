import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///riddlescape.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Countdown for one run (seconds)
    SESSION_DURATION_SEC = int(os.environ.get('SESSION_DURATION_SEC', '900'))
    TICK_INTERVAL_SEC = float(os.environ.get('TICK_INTERVAL_SEC', '1'))
    # Remaining time at which clients switch the timer to its critical style
    TIMER_CRITICAL_SEC = int(os.environ.get('TIMER_CRITICAL_SEC', '60'))
    LEADERBOARD_LIMIT = int(os.environ.get('LEADERBOARD_LIMIT', '20'))
    # Optional: heartbeat interval for timer worker logs (sec). 0 disables.
    TIMER_HEARTBEAT_SEC = int(os.environ.get('TIMER_HEARTBEAT_SEC', '0'))
