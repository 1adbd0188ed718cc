from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
allowed_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from riddlescape.main import main
    flask_app.register_blueprint(main)

    from riddlescape.api.escape import escape
    flask_app.register_blueprint(escape, url_prefix='/api')

    from riddlescape.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    @click.command('db-reset')
    def db_reset_command():
        """Drops and recreates the progress tables."""
        import riddlescape.models  # noqa: F401
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            print('Progress store has been reset!')

    @click.command('list-codes')
    def list_codes_command():
        """Prints the access code chain of the puzzle catalog."""
        from riddlescape.catalog import CATALOG
        for puzzle in CATALOG:
            print(f'{puzzle.access_code:<10} -> {puzzle.route:<22} reveals {puzzle.reveals}')

    @click.command('show-scores')
    def show_scores_command():
        """Prints the completion records held by this process."""
        from riddlescape.services.ledger import ledger
        records = ledger.records()
        if not records:
            print('No completion records yet.')
        for rec in records:
            print(f"{rec['timestamp']}  {rec['username']:<20} {rec['totalTime']}  {rec['finalScore']}")

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(list_codes_command)
    flask_app.cli.add_command(show_scores_command)

    return flask_app
