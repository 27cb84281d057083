from loguru import logger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from hybrid_coach.coach.config.models import COACH_CHAT_MODEL, PLAN_SYNTHESIS_MODEL


class Settings(BaseSettings):
    openai_api_key: str = Field(default="", validation_alias="OPENAI_API_KEY")
    llm_provider: str = Field(default="openai", validation_alias="LLM_PROVIDER")
    coach_chat_model: str = Field(
        default=COACH_CHAT_MODEL,
        validation_alias="COACH_CHAT_MODEL",
        description="Model used for conversational turns",
    )
    plan_synthesis_model: str = Field(
        default=PLAN_SYNTHESIS_MODEL,
        validation_alias="PLAN_SYNTHESIS_MODEL",
        description="Model used for schema-constrained plan generation",
    )
    chat_history_window: int = Field(
        default=10,
        validation_alias="CHAT_HISTORY_WINDOW",
        description="Number of most recent turns sent with each conversational request",
    )
    builder_transition_delay: float = Field(
        default=1.0,
        validation_alias="BUILDER_TRANSITION_DELAY",
        description="Seconds between the builder notice and the switch to builder mode",
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: str | None = Field(default=None, validation_alias="LOG_FILE")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate that log level is one of the standard logging levels."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            logger.warning(f"Invalid LOG_LEVEL '{value}'. Valid levels are: {', '.join(valid_levels)}. Defaulting to INFO.")
            return "INFO"
        return upper_value

    @field_validator("chat_history_window")
    @classmethod
    def validate_history_window(cls, value: int) -> int:
        if value < 0:
            logger.warning(f"CHAT_HISTORY_WINDOW must not be negative, got {value}. Defaulting to 10.")
            return 10
        return value

    @field_validator("openai_api_key")
    @classmethod
    def validate_api_key(cls, value: str) -> str:
        """Warn when the OpenAI key is missing.

        Empty values are allowed so the app and tests can start; generation
        calls will fail with a transport error until a key is configured.
        """
        if not value:
            logger.warning(
                "OPENAI_API_KEY is not set. Coach chat and plan generation will not work. "
                "Set it in .env file or environment variables."
            )
        return value


settings = Settings()
