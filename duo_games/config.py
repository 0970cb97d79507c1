import logging
import sys
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from duo_games.schemas.game_engine import RuleOptions, UnoWinOrder

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Upstash Redis
    UPSTASH_REDIS_REST_URL: str
    UPSTASH_REDIS_REST_TOKEN: str

    # App config
    DEBUG: bool = False
    ROOM_ID: str = "duo_games"

    # House rules
    UNO_WIN_ORDER: UnoWinOrder = UnoWinOrder.WIN_FIRST
    PARTSHI_REROLL_ON_UNUSABLE_SIX: bool = True

    # Store config
    STORE_WRITE_RETRIES: int = 3

    @field_validator("UPSTASH_REDIS_REST_URL")
    @classmethod
    def validate_redis_url(cls, v: str) -> str:
        if not v.startswith("https://"):
            raise ValueError("UPSTASH_REDIS_REST_URL must be a valid HTTPS URL")
        return v

    @field_validator("UPSTASH_REDIS_REST_TOKEN")
    @classmethod
    def validate_redis_token(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("UPSTASH_REDIS_REST_TOKEN cannot be empty")
        return v

    @field_validator("STORE_WRITE_RETRIES")
    @classmethod
    def validate_write_retries(cls, v: int) -> int:
        if v < 1:
            raise ValueError("STORE_WRITE_RETRIES must be at least 1")
        return v

    def rule_options(self) -> RuleOptions:
        return RuleOptions(
            uno_win_order=self.UNO_WIN_ORDER,
            partshi_reroll_on_unusable_six=self.PARTSHI_REROLL_ON_UNUSABLE_SIX,
        )


def configure_logging(debug: bool = False) -> None:
    """Configure logging for the application."""
    log_level = logging.DEBUG if debug else logging.INFO
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    configure_logging(settings.DEBUG)
    logger.info("Settings loaded successfully")
    logger.debug("Room ID: %s", settings.ROOM_ID)
    logger.debug("Rule options: %s", settings.rule_options())
    return settings
