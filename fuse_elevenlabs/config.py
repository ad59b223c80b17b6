import warnings
from typing import Literal, Optional

from pydantic import HttpUrl, computed_field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing_extensions import Self


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_ignore_empty=True, extra="ignore"
    )
    PROJECT_NAME: str = "Fuse ElevenLabs"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    LOG_LEVEL: str = "INFO"

    # ElevenLabs API
    ELEVENLABS_API_BASE_URL: HttpUrl = HttpUrl("https://api.elevenlabs.io/v1")
    # Used only when a node runs without an explicit credential
    ELEVENLABS_API_KEY: Optional[str] = None

    # Audio endpoints can take a while on long inputs
    HTTP_TIMEOUT_SECONDS: float = 120.0

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def _normalize_log_level(cls, v: str) -> str:
        return str(v).upper()

    @computed_field  # type: ignore[prop-decorator]
    @property
    def api_base_url(self) -> str:
        # httpx joins relative endpoints onto the base only with a trailing slash
        return str(self.ELEVENLABS_API_BASE_URL).rstrip("/") + "/"

    @model_validator(mode="after")
    def _check_timeout(self) -> Self:
        if self.HTTP_TIMEOUT_SECONDS <= 0:
            message = "HTTP_TIMEOUT_SECONDS must be positive"
            if self.ENVIRONMENT == "local":
                warnings.warn(f"{message}, falling back to 120s", stacklevel=1)
                self.HTTP_TIMEOUT_SECONDS = 120.0
            else:
                raise ValueError(message)
        return self


settings = Settings()  # type: ignore
