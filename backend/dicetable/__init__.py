from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

socketio = SocketIO(async_mode=None)


def _allowed_origins(config_class):
    raw = getattr(config_class, 'CORS_ORIGINS', '*') or '*'
    if raw == '*':
        return '*'
    return [origin.strip() for origin in raw.split(',') if origin.strip()]


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = _allowed_origins(config_class)
    CORS(flask_app, origins=allowed_origins)

    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # All room state is in memory and scoped to this app instance
    from dicetable.services.rooms import ConnectionRegistry, RoomStore
    flask_app.extensions['rooms'] = RoomStore()
    flask_app.extensions['connections'] = ConnectionRegistry()

    from dicetable.routes import main
    flask_app.register_blueprint(main)

    from dicetable.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    from dicetable.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/'))

    flask_app.logger.info(f"[app] namespace={flask_app.config.get('SOCKETIO_NAMESPACE', '/')} origins={allowed_origins}")
    return flask_app
