"""
Engine configuration.

Settings are read from the environment (prefix CRITERION_) or passed
explicitly, and handed to an Engine at construction time.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Runtime settings of an Engine."""

    model_config = SettingsConfigDict(
        env_prefix="CRITERION_",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    log_level: str = Field(default="info", description="Minimum level for configure_logging()")
    log_json: bool = Field(default=True, description="Render log events as JSON lines")
    log_evaluations: bool = Field(
        default=False,
        description="Emit a decision_evaluated debug event for every run",
    )
