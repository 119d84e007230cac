"""Application configuration classes."""
import os


class Config:
    """Base configuration."""

    SECRET_KEY: str = os.environ.get("SECRET_KEY", "dev-secret-change-in-production")
    DATABASE_URL: str = os.environ.get("DATABASE_URL", "sqlite:///werwolf.db")
    SQLALCHEMY_DATABASE_URI: str = DATABASE_URL
    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False
    CORS_ORIGINS: str = os.environ.get("CORS_ORIGINS", "*")
    SOCKETIO_ASYNC_MODE: str = os.environ.get("SOCKETIO_ASYNC_MODE", "eventlet")
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")

    # Roster bounds, counted without the host
    GAME_MIN_PLAYERS: int = int(os.environ.get("GAME_MIN_PLAYERS", "6"))
    GAME_MAX_PLAYERS: int = int(os.environ.get("GAME_MAX_PLAYERS", "20"))
    # "wolf,police,doctor" or "wolf,doctor,police"
    NIGHT_ORDER: str = os.environ.get("NIGHT_ORDER", "wolf,police,doctor")
    # What happens when a mid-game removal leaves too few players: "end" or "reset_lobby"
    REMOVAL_POLICY: str = os.environ.get("REMOVAL_POLICY", "end")
    # Seed for role shuffling; None means fresh randomness per game
    ROLE_SEED: int | None = None


class DevelopmentConfig(Config):
    """Development configuration."""

    DEBUG: bool = True
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "DEBUG")


class ProductionConfig(Config):
    """Production configuration."""

    DEBUG: bool = False


class TestingConfig(Config):
    """Test configuration: in-memory database, no eventlet."""

    TESTING: bool = True
    SQLALCHEMY_DATABASE_URI: str = "sqlite://"
    SOCKETIO_ASYNC_MODE: str = "threading"
    LOG_LEVEL: str = "WARNING"
    NIGHT_ORDER: str = "wolf,police,doctor"
    REMOVAL_POLICY: str = "end"


config_map = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
    "default": DevelopmentConfig,
}
