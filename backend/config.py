import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', '3000'))
    # Comma separated list, '*' allows any origin
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*')
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    # Minimum players with a character before a game can start
    MIN_PLAYERS = int(os.environ.get('MIN_PLAYERS', '2'))
    # New players spawn here with this score
    STARTING_SCORE = int(os.environ.get('STARTING_SCORE', '1000'))
    SPAWN_X = int(os.environ.get('SPAWN_X', '850'))
    SPAWN_Y = int(os.environ.get('SPAWN_Y', '850'))
    DIE_FACES = int(os.environ.get('DIE_FACES', '6'))
    # Optional: cap on dice per roll. 0 disables.
    MAX_DICE = int(os.environ.get('MAX_DICE', '0'))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
