from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Empty means the process local timezone
    user_timezone: str = ""

    # Sentry error tracking
    sentry_dsn: str = ""
    sentry_environment: str = "production"

    max_input_length: int = 1000
    max_date_text_length: int = 100
    end_of_month_window_days: int = 5  # trailing days offered for "end of month"
    log_level: str = "INFO"

    @property
    def has_sentry(self) -> bool:
        return bool(self.sentry_dsn)


settings = Settings()
