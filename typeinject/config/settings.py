"""Typed settings for containers and logging."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


class ContainerSettings(BaseModel):
    """Behaviour switches for a ``Container``."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    # Guard registration and resolution with a re-entrant lock
    thread_safe: bool = False
    # Raise CyclicDependencyError instead of recursing without bound
    detect_cycles: bool = True
    # Dataclass field metadata key that marks a field for injection
    marker_key: str = "inject"

    @field_validator("marker_key")
    @classmethod
    def _marker_key_not_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("marker_key must not be empty")
        return value


class LoggingSettings(BaseModel):
    """Settings passed to ``configure_logging``."""

    model_config = ConfigDict(extra="forbid")

    level: str = "WARNING"

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"level must be one of {', '.join(LOG_LEVELS)}")
        return level


class Settings(BaseModel):
    """Root of the typeinject configuration file."""

    container: ContainerSettings = Field(default_factory=ContainerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
