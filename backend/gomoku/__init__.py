from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    allowed_origins = flask_app.config.get('CORS_ORIGINS', [])
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # In-memory game state lives for the lifetime of the app instance
    from gomoku.services.games import RoomRegistry, SessionManager
    from gomoku.services.switch import SharedSwitch
    registry = RoomRegistry(
        room_count=flask_app.config.get('ROOM_COUNT', 3),
        board_size=flask_app.config.get('BOARD_SIZE', 15),
    )
    flask_app.extensions['room_registry'] = registry
    flask_app.extensions['session_manager'] = SessionManager(
        registry,
        randomize=flask_app.config.get('RANDOMIZE_COLORS', True),
    )
    flask_app.extensions['shared_switch'] = SharedSwitch()

    from gomoku.main import main
    flask_app.register_blueprint(main)

    from gomoku.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    # Register Socket.IO event handlers on the initialized socketio instance
    from gomoku.socketio_events import register_socketio_handlers
    register_socketio_handlers(
        namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/ws'),
        switch_namespace=flask_app.config.get('SWITCH_NAMESPACE', '/switch'),
    )

    flask_app.logger.info(f"[init] rooms={len(registry)} board={registry.board_size}")
    return flask_app
