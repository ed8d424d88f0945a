"""Configuration models using Pydantic."""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings

DEFAULT_PROMPT = "You must specify what action this task will perform."


class EditorSettings(BaseSettings):
    """Global action editor configuration settings."""

    # Logging configuration
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: str = Field(
        default="json",
        pattern="^(json|plain)$",
        description="Log format (json, plain)"
    )

    # Action kind constraints
    available_actions: int = Field(
        default=0xF,
        ge=1,
        le=0xF,
        description="Bit set of action kinds the editor may offer"
    )
    support_v1_only: bool = Field(
        default=False,
        description="Offer only actions supported by version 1.0 of the scheduler"
    )
    use_unified_scheduling_engine: bool = Field(
        default=False,
        description="Offer only actions supported by the Unified Scheduling Engine"
    )

    # Dialog behavior
    allow_run: bool = Field(
        default=False,
        description="Allow the configured action to be test run from the editor"
    )
    prompt: str = Field(
        default=DEFAULT_PROMPT,
        description="Prompt text shown at the top of the editor"
    )

    # Test run configuration
    smtp_port: int = Field(
        default=25,
        ge=1,
        le=65535,
        description="SMTP port used when test running e-mail actions"
    )
    smtp_timeout: int = Field(
        default=30,
        ge=1,
        le=300,
        description="SMTP connection timeout in seconds"
    )

    @model_validator(mode="after")
    def _check_engine_version(self) -> "EditorSettings":
        if self.support_v1_only and self.use_unified_scheduling_engine:
            raise ValueError(
                "Version 1.0 of the Task Scheduler cannot use the Unified Scheduling Engine"
            )
        return self

    class Config:
        """Pydantic configuration."""
        env_prefix = "ACTION_EDITOR_"
        case_sensitive = False
        validate_assignment = True
