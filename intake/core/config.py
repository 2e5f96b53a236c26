from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    app_name: str = "Client Intake"
    debug: bool = False

    # Draft store API (create/fetch/patch/submit)
    api_base_url: str = "http://localhost:3005"
    http_timeout_seconds: float = 10.0

    # Origin the resume links point at: {public_base}/form/{id}
    public_base: str = "http://localhost:5173"

    # Quiet interval after the last edit before an autosave fires
    autosave_debounce_seconds: float = 0.6

    # Logging
    log_level: str = "INFO"
    json_logs: bool = True


@lru_cache
def get_settings() -> Settings:
    return Settings()
