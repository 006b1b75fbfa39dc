"""Application settings and configuration.

This module defines all configuration options for the desiiseb feed core.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or a `.env` file."""

    # Application metadata
    app_name: str = Field(default="desiiseb", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")

    # Database configuration
    database_url: str = Field(
        default="sqlite+aiosqlite:///./desiiseb.db",
        alias="DATABASE_URL",
    )
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Post authoring limits (Unicode code points)
    post_max_length: int = Field(default=280, ge=1, alias="POST_MAX_LENGTH")

    # Feed pagination
    feed_page_size: int = Field(default=20, ge=1, alias="FEED_PAGE_SIZE")
    feed_max_page_size: int = Field(default=100, ge=1, alias="FEED_MAX_PAGE_SIZE")

    # Each notification source is capped independently before the merge.
    notification_limit_per_source: int = Field(
        default=20,
        ge=1,
        alias="NOTIFICATION_LIMIT_PER_SOURCE",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling such as Alembic.

        Returns:
            Database URL compatible with synchronous database drivers
        """
        url = self.effective_database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        if url.startswith("sqlite+aiosqlite"):
            return url.replace("sqlite+aiosqlite", "sqlite", 1)
        return url

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides.

        Returns:
            The active database URL (test database if in testing mode, otherwise production)
        """
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url


settings = Settings()
