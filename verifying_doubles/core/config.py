import logging
from enum import Enum
from pathlib import Path
from typing import Annotated, List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

CONFIG_DIR = Path(__file__).parent

PACKAGE_LOGGER = "verifying_doubles"


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class DoublesSettings(BaseSettings):
    RECORD_FAILED_CALLS: bool = Field(
        default=True,
        description=(
            "Keep calls that failed verification (unknown name, bad arity, unconfigured) in the "
            "invocation log. They are marked as failed and never satisfy an expectation."
        ),
    )
    VERIFY_ARITY: bool = Field(
        default=True,
        description="Check call-time arguments against the real method's signature on verifying doubles.",
    )
    SUGGESTION_CUTOFF: float = Field(
        default=0.6,
        ge=0.0,
        le=1.0,
        description="Similarity cutoff used when suggesting a known method name for a typo.",
    )
    MAX_SUGGESTIONS: int = Field(
        default=3,
        ge=0,
        le=10,
        description="How many 'did you mean' candidates to show. 0 disables suggestions.",
    )
    LOG_LEVEL: LogLevel = Field(default=LogLevel.WARNING, description="Level of the package logger")
    REFERENCE_MODULES: Annotated[List[str], NoDecode] = Field(
        default_factory=list,
        description=(
            "Modules searched, in order, when a verifying double names its reference by bare class "
            "name (e.g. 'BookOrder'). Accepts a comma-separated string from the environment."
        ),
    )

    @field_validator("REFERENCE_MODULES", mode="before")
    @classmethod
    def parse_reference_modules(cls, v):
        if isinstance(v, str):
            return [m.strip() for m in v.split(",") if m.strip()]
        return v

    model_config = SettingsConfigDict(
        env_prefix="DOUBLES_",
        env_file=CONFIG_DIR.parent.parent / ".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


def configure_logging(settings_instance: DoublesSettings | None = None) -> logging.Logger:
    """Apply LOG_LEVEL to the package logger and return it."""
    settings_instance = settings_instance or settings
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(settings_instance.LOG_LEVEL.value)
    return package_logger


# Global settings instance
settings = DoublesSettings()
