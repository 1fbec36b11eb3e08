"""Runtime configuration for BLIND AID."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven runtime settings."""

    model_config = SettingsConfigDict(env_prefix="BLIND_AID_", env_file=".env", extra="ignore")

    app_name: str = "blind-aid"
    log_level: str = "INFO"
    voice_enabled: bool = True
    language: str = "en-US"

    speak_delay_seconds: float = Field(
        default=0.05,
        description="Delay between cancelling the previous utterance and starting the next one.",
    )
    speak_retry_delay_seconds: float = 0.1
    max_speak_retries: int = 1
    max_speech_chars: int = 500

    recognition_timeout_seconds: float | None = Field(
        default=15.0,
        description="Abort a listening session that produced no callback within this many seconds.",
    )
    phrase_time_limit_seconds: float = 5.0

    answer_endpoint: str | None = Field(
        default=None,
        description="HTTP endpoint of the question-answering service (POST {'query': ...}).",
    )
    answer_timeout_seconds: float | None = 20.0

    tts_voice_id: str | None = None
    tts_rate: int | None = None
    tts_volume: float | None = None


settings = Settings()
