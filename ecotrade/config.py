# config.py
import os


def _database_url():
    # Heroku/Railway still hand out postgres:// URLs
    url = os.environ.get('DATABASE_URL')
    if url:
        return url.replace('postgres://', 'postgresql://', 1)
    return 'sqlite:///ecotrade.db'


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY', 'ecotrade-dev-key')
    SQLALCHEMY_DATABASE_URI = _database_url()
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # points granted on self-registration
    WELCOME_POINTS = int(os.environ.get('WELCOME_POINTS', 100))


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = 'testing'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    LOG_LEVEL = 'WARNING'
