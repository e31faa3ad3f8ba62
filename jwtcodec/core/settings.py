"""Codec settings loaded from environment variables."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ALGORITHM_DEFAULT = "HS256"


class KeySettings(BaseSettings):
    """Asymmetric key settings.

    ``private`` and ``public`` accept inline PEM text, a ``file://`` URI or a
    filesystem path.
    """

    model_config = SettingsConfigDict(env_prefix="JWT_KEYS_")

    private: str | None = None
    public: str | None = None
    passphrase: str | None = None


class CodecSettings(BaseSettings):
    """Algorithm, secret and key settings for the token codec."""

    model_config = SettingsConfigDict(env_prefix="JWT_")

    secret: str | None = None
    algorithm: str = ALGORITHM_DEFAULT
    keys: KeySettings = Field(default_factory=KeySettings)
    mirror_claims_in_header: bool = False


class LoggingSettings(BaseSettings):
    """Structured logging settings."""

    model_config = SettingsConfigDict(env_prefix="JWT_LOG_")

    level: Literal["debug", "info", "warning", "error", "critical"] = "info"
    json_output: bool = True
