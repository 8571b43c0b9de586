import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    CORS_ORIGINS = [o.strip() for o in os.environ.get('CORS_ORIGINS', 'http://localhost:3000,http://127.0.0.1:3000').split(',') if o.strip()]
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/ws')
    # Capacity ceilings
    MAX_GAMES = int(os.environ.get('MAX_GAMES', '100'))
    MAX_PLAYERS_PER_GAME = int(os.environ.get('MAX_PLAYERS_PER_GAME', '100'))
    # Question time limits (seconds); per-question values are clamped to [MIN, MAX]
    DEFAULT_TIME_LIMIT_SEC = int(os.environ.get('DEFAULT_TIME_LIMIT_SEC', '20'))
    MIN_TIME_LIMIT_SEC = int(os.environ.get('MIN_TIME_LIMIT_SEC', '5'))
    MAX_TIME_LIMIT_SEC = int(os.environ.get('MAX_TIME_LIMIT_SEC', '90'))
    # Per source address: at most RATE_LIMIT_MAX events per RATE_LIMIT_WINDOW_SEC
    RATE_LIMIT_WINDOW_SEC = float(os.environ.get('RATE_LIMIT_WINDOW_SEC', '10'))
    RATE_LIMIT_MAX = int(os.environ.get('RATE_LIMIT_MAX', '30'))
    GAME_CODE_LENGTH = int(os.environ.get('GAME_CODE_LENGTH', '4'))
    # Dev server bind address
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', '3000'))
