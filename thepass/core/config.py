from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "thepass"

    # ---------------------------------------------------------------------
    # API contract / OpenAPI
    # ---------------------------------------------------------------------

    api_version: str = "1.0.0"
    api_description: str = (
        "The Pass API: workflow assignments, task completions and task transfers.\n\n"
        "Protected endpoints require the X-Actor-User-Id header (profile UUID). "
        "Role and permissions are resolved from the profile row."
    )

    env: str = "local"
    debug: bool = True
    log_level: str = "INFO"

    db_host: str = "127.0.0.1"
    db_port: int = 5432
    db_name: str = "thepass"
    db_user: str = "thepass"
    db_password: str = "thepass"

    # Full URL override (e.g. Supabase pooler connection string)
    db_url: str | None = None

    test_database_url: str = "sqlite+pysqlite:///:memory:"

    @property
    def database_url(self) -> str:
        if self.db_url:
            return self.db_url
        return (
            f"postgresql+psycopg://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )


settings = Settings()
