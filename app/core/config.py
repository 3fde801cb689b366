"""Konfigurationsmodul für den LINE-Sekretär-Bot: lädt LINE-Zugangsdaten,
Gemini-Key, Datenbank-URI und Port via Pydantic-Settings."""
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Hält alle konfigurierbaren Werte, die der Bot zur Laufzeit benötigt.

    Ist ``database_url`` leer, läuft der Bot ohne Verlauf (jede Nachricht
    wird einzeln an Gemini geschickt).
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    line_channel_token: str = Field("", alias="LINE_CHANNEL_TOKEN")
    line_channel_secret: str = Field("", alias="LINE_CHANNEL_SECRET")

    gemini_api_key: str = Field("", alias="GEMINI_API_KEY")  # Muss per Env gesetzt werden.
    gemini_model: str = Field("gemini-2.0-flash", alias="GEMINI_MODEL")
    # OpenAI-kompatibler Endpunkt der Gemini API.
    gemini_base_url: str = Field(
        "https://generativelanguage.googleapis.com/v1beta/openai/", alias="GEMINI_BASE_URL"
    )
    gemini_candidate_count: int = Field(1, alias="GEMINI_CANDIDATE_COUNT")

    database_url: str = Field("", alias="DATABASE_URL")
    db_connect_timeout: int = Field(10, alias="DB_CONNECT_TIMEOUT")

    port: int = Field(5000, alias="PORT")
    log_file: str = Field("bot_debug.log", alias="LOG_FILE")

    @property
    def history_enabled(self) -> bool:
        return bool(self.database_url)


settings = Settings()
