import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Fixed room pool; rooms are never added or removed at runtime
    ROOM_COUNT = int(os.environ.get('ROOM_COUNT', '3'))
    BOARD_SIZE = int(os.environ.get('BOARD_SIZE', '15'))
    # Coin flip for who plays black on every new game (including rematches)
    RANDOMIZE_COLORS = os.environ.get('RANDOMIZE_COLORS', '1').lower() in ('1', 'true', 'yes')
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/ws')
    SWITCH_NAMESPACE = os.environ.get('SWITCH_NAMESPACE', '/switch')
    CORS_ORIGINS = os.environ.get(
        'CORS_ORIGINS',
        'http://localhost:5173,http://127.0.0.1:5173,http://localhost:5174,http://127.0.0.1:5174',
    ).split(',')
