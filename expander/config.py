from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Image Expander API"
    env: str = "local"
    log_level: str = "INFO"

    ai_provider: str = "auto"  # auto|gemini|mirror
    gemini_api_key: str | None = None
    describe_model: str = "gemini-2.5-flash"
    expand_model: str = "gemini-2.5-flash-image"

    max_upload_bytes: int = 20 * 1024 * 1024
    session_max_count: int = 100

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


settings = Settings()
