"""
Configuration management for the minigraphql services
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = "sqlite:///./minigraphql.db"
    database_pool_size: int = 5
    database_max_overflow: int = 10
    sql_echo: bool = False

    # Document collections
    tutorial_collection: str = "tutorial"
    post_collection: str = "post"
    seed_on_startup: bool = True  # wipe and reseed mock data when the API starts

    # API Settings
    api_host: str = "0.0.0.0"
    api_port: int = 8080
    api_reload: bool = False
    cors_origins: list[str] = ["*"]
    graphiql: bool = True

    # Environment
    environment: str = "development"  # 'development', 'staging', 'production'
    debug: bool = False
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_prefix = "MINIGRAPHQL_"
        case_sensitive = False


# Global settings instance
settings = Settings()

# Debug: Log settings initialization (only in debug mode)
if settings.debug:
    from .logging import get_logger

    _logger = get_logger(__name__)
    _logger.debug(
        "Settings initialized",
        database_url=settings.database_url,
        environment=settings.environment,
    )


def get_database_url() -> str:
    """Get the configured database URL."""
    return settings.database_url
