from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    environment: str = "development"  # development | production
    app_url: str = "http://localhost:8000"
    session_secret: str | None = None
    scanner_session_secret: str | None = None
    admin_user: str = "admin"
    admin_pass: str = "admin123"
    admin_key: str | None = None
    supabase_url: str | None = None
    supabase_service_role_key: str | None = None
    ticket_jwt_secret: str = "dev-secret-change-me"
    ticket_jwt_algorithm: str = "HS256"
    ticket_expiration_days: int = 180
    session_ttl_seconds: int = 60 * 60 * 12
    admin_key_session_ttl_seconds: int = 60 * 60 * 24 * 7
    scanner_session_ttl_seconds: int = 60 * 60 * 12

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() == "production"


settings = Settings()
