"""Consent notice tools configuration settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
import structlog

logger = structlog.stdlib.get_logger().bind(component="config")


class ConsentApiSettings(BaseSettings):
    """Consent management API configuration settings."""

    BASE_URL: str = Field(default="https://api.didomi.io/v1", alias="DIDOMI_API_URL")
    API_KEY: str | None = Field(default=None, alias="DIDOMI_API_KEY")
    API_SECRET: str | None = Field(default=None, alias="DIDOMI_API_SECRET")
    ORGANIZATION_ID: str | None = Field(default=None, alias="DIDOMI_ORGANIZATION_ID")
    TIMEOUT: int = Field(default=60, alias="DIDOMI_API_TIMEOUT")
    PARTNERS_LIMIT: int = Field(default=1000, alias="DIDOMI_PARTNERS_LIMIT")

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


class NoticeSettings(BaseSettings):
    """Notice selection settings."""

    NOTICE_ID: str | None = Field(default=None, alias="NOTICE_ID")
    MASTER_NOTICE_ID: str | None = Field(default=None, alias="MASTER_NOTICE_ID")
    REGULATION_ID: str = Field(default="gdpr", alias="REGULATION_ID")
    REGULATION_IDS: str = Field(default="gdpr", alias="REGULATION_IDS")

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def regulation_ids(self) -> list[str]:
        """Regulation IDs parsed from the comma separated `REGULATION_IDS`."""
        return [item.strip() for item in self.REGULATION_IDS.split(",") if item.strip()]


class FileSettings(BaseSettings):
    """Local file locations used by the pull/push commands."""

    TRANSLATIONS_PATH: str = Field(
        default="./data/notice_translations_input.json", alias="TRANSLATIONS_PATH"
    )
    MACROS_PATH: str = Field(default="./config/macros.json", alias="MACROS_PATH")
    PURPOSES_INPUT_PATH: str = Field(
        default="./data/purposes_translations_input.json",
        alias="PURPOSES_INPUT_PATH",
    )
    PURPOSES_OUTPUT_PATH: str = Field(
        default="./data/purposes_translations_output.json",
        alias="PURPOSES_OUTPUT_PATH",
    )
    REGULATIONS_DIR: str = Field(default="./translations", alias="REGULATIONS_DIR")
    VENDORS_PATH: str = Field(default="./config/vendors.json", alias="VENDORS_PATH")

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


class Settings(BaseSettings):
    """Consent notice tools configuration settings."""

    PREFIX: str = ""
    LOG_LEVEL: str = "INFO"
    DRY_RUN: bool = False

    api: ConsentApiSettings
    notice: NoticeSettings
    files: FileSettings

    @property
    def is_production(self) -> bool:
        """Check if the tools are running against production."""
        return not bool(self.PREFIX)

    def __init__(self, **kwargs):
        settings_map = {
            "api": ConsentApiSettings,
            "notice": NoticeSettings,
            "files": FileSettings,
        }

        for setting_name, setting_class in settings_map.items():
            if setting_name not in kwargs:
                kwargs[setting_name] = setting_class()

        super().__init__(**kwargs)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


# Create the settings instance
settings = Settings()
