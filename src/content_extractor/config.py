"""Application configuration via pydantic-settings."""

from functools import lru_cache

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
    )

    # yt-dlp credentials: a cookie file path, or base64 Netscape cookie content
    yt_dlp_cookies_file: str = ""
    yt_dlp_cookies: str = ""

    # Video transcription
    disable_video_transcription: bool = False
    media_transcription_timeout: float = 90.0
    transcript_languages: str = "ru,en,uk"
    transcription_language: str = "ru"

    # Browser
    browser_enabled: bool = True
    browser_executable_path: str = Field(
        default="",
        validation_alias=AliasChoices("browser_executable_path", "puppeteer_executable_path"),
    )

    # YouTube
    youtube_api_key: str = ""
    youtube_proxy_url: str = ""

    # Third-party rendering service (comma-separated keys, tried in rotation)
    scrapingbee_api_keys: str = Field(
        default="",
        validation_alias=AliasChoices("scrapingbee_api_keys", "scrapingbee_api_key"),
    )

    # Third-party transcription services
    teamlogs_api_key: str = ""
    audio_transcription_api_key: str = ""
    transcription_api_key: str = ""
    transcription_api_url: str = ""
    openai_api_key: str = ""

    # Local speech model (faster-whisper)
    local_speech_model_enabled: bool = True
    whisper_model: str = "small"
    whisper_compute_type: str = "int8"

    # App
    environment: str = "development"
    log_level: str = "INFO"

    @field_validator("media_transcription_timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("media_transcription_timeout must be positive")
        return value

    @property
    def scrapingbee_keys(self) -> list[str]:
        """Configured rendering-service keys, in rotation order."""
        return [key.strip() for key in self.scrapingbee_api_keys.split(",") if key.strip()]

    @property
    def transcript_language_list(self) -> list[str]:
        return [lang.strip() for lang in self.transcript_languages.split(",") if lang.strip()]

    @property
    def youtube_api_configured(self) -> bool:
        return bool(self.youtube_api_key) and self.youtube_api_key != "your_youtube_api_key_here"


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings. Lazy initialization to avoid import-time errors."""
    return Settings()
