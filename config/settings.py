from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Remote API — the token is optional so the app can boot before login
    API_BASE_URL: str = "https://hcb.hackclub.com/api/v4/"
    API_TOKEN: str | None = None
    HTTP_TIMEOUT_SECONDS: float = 15.0

    # Sync timing (milliseconds, matching the mobile client constants)
    FETCH_COOLDOWN_MS: int = 10_000
    ERROR_DEBOUNCE_MS: int = 5_000
    DEDUPING_INTERVAL_MS: int = 2_000

    # Pin persistence: "file" (local JSON) or "redis"
    PIN_STORE: str = "file"
    PIN_FILE_PATH: str = "~/.hcb/pinned_organizations.json"
    REDIS_URL: str = "redis://localhost:6379/0"
    PINNED_REDIS_KEY: str = "hcb:pinned_organizations"

    # App
    APP_NAME: str = "HCB Sync"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"


settings = Settings()
