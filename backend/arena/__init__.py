from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = [flask_app.config.get('FRONTEND_URL', 'http://localhost:3000')]

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from arena.main import main
    flask_app.register_blueprint(main)

    from arena.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    # One gateway per app: it owns the live rooms, queues and connection identities
    from arena.services.multiplayer.gateway import SessionGateway
    from arena.services.multiplayer.records import ScoreRecorder
    from arena.services.multiplayer.service import MultiplayerService
    from arena.services.multiplayer.transport import SocketIOTransport

    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/')
    transport = SocketIOTransport(socketio, namespace=namespace)
    gateway = SessionGateway(
        MultiplayerService(),
        transport,
        ScoreRecorder(flask_app, transport.start_task),
        config=flask_app.config,
        logger=flask_app.logger,
    )
    flask_app.extensions['arena_gateway'] = gateway

    from arena.socketio_events import register_socketio_handlers
    register_socketio_handlers(gateway, namespace=namespace)

    stale_ttl = int(flask_app.config.get('STALE_ROOM_TTL_SEC', 0))
    if stale_ttl > 0 and not flask_app.config.get('TESTING'):
        transport.start_task(gateway.run_stale_room_reaper, stale_ttl,
                             int(flask_app.config.get('STALE_ROOM_SWEEP_SEC', 60)))

    @click.command('db-reset')
    def db_reset_command():
        """Drops and recreates the score tables."""
        import arena.models  # noqa: F401
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            print('Database has been reset!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app


def get_gateway(flask_app=None):
    from flask import current_app
    return (flask_app or current_app).extensions['arena_gateway']
