from pydantic_settings import BaseSettings
from pydantic import Field
import os
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


class Config(BaseSettings):
    # Database Configuration (SQLite via aiosqlite by default)
    database_url: str = Field(
        default=f"sqlite+aiosqlite:///{PROJECT_ROOT}/data/shortages.db",
        alias="DB_URL",
    )

    # JWT Configuration
    secret_key: str = Field(default="change-me", alias="JWT_SECRET")
    algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 12, alias="ACCESS_TOKEN_EXPIRE_MINUTES"
    )

    # Form drafts
    autosave_interval_seconds: float = Field(
        default=30.0, alias="AUTOSAVE_INTERVAL_SECONDS"
    )
    blank_row_count: int = Field(default=30, alias="BLANK_ROW_COUNT")
    serialize_saves: bool = Field(default=True, alias="SERIALIZE_SAVES")

    # Branches, departments, contacts and report labels
    directory_file: str = Field(
        default=str(Path(__file__).resolve().parent.parent / "data" / "directory.json"),
        alias="DIRECTORY_FILE",
    )

    # PDF export. Arabic labels (data/directory.ar.json) need a Unicode TTF font.
    pdf_font_path: str = Field(default="", alias="PDF_FONT_PATH")
    pdf_text_shaping: bool = Field(default=False, alias="PDF_TEXT_SHAPING")

    whatsapp_base_url: str = Field(default="https://wa.me", alias="WHATSAPP_BASE_URL")

    is_production: bool = (
        os.getenv("ENVIRONMENT", "development").lower() == "production"
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


# Instantiate the settings
config = Config()
