"""Central configuration (Pydantic Settings).

- Loads variables from the `.env` file at the project root.
- Groups settings by area: App, CORS, Mongo, OpenAI, Uploads, Client.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import AliasChoices, Field
from pathlib import Path

# Project root (independent of CWD)
ROOT_DIR = Path(__file__).resolve().parents[2]
ENV_FILE = ROOT_DIR / ".env"


class Settings(BaseSettings):
    """Configuration values with reasonable defaults.

    Every value can be overridden via environment variables (.env).
    """
    # App
    app_name: str = "Vocal Notes API"
    api_prefix: str = "/api"
    port: int = 3001
    log_level: str = "INFO"

    # CORS (Vite/React dev server on localhost)
    cors_origins: list[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]
    cors_allow_any: bool = False

    # Mongo
    mongo_uri: str = Field(
        "mongodb://localhost:27017",
        validation_alias=AliasChoices("MONGO_URI", "MONGODB_URI"),
    )
    mongo_db: str = "vocal_notes_app"
    mongo_tls: bool = False
    # TLS relax options (dev only)
    mongo_tls_insecure: bool = False
    mongo_tls_allow_invalid_hostnames: bool = False
    mongo_timeout_ms: int = 15000

    # OpenAI
    openai_api_key: str | None = None
    openai_transcription_model: str = "whisper-1"
    openai_extraction_model: str = "gpt-3.5-turbo"
    extraction_max_tokens: int = 500

    # Uploaded audio artifacts (transient)
    uploads_dir: Path = ROOT_DIR / "uploads"

    # Client
    api_base_url: str | None = Field(
        None,
        validation_alias=AliasChoices("API_BASE_URL", "VITE_API_URL"),
    )
    local_store_path: Path = Path.home() / ".voicenotes" / "notes.json"
    client_timeout_seconds: float | None = None

    @property
    def api_prefix_normalized(self) -> str:
        """`api_prefix` as `/segment` with no trailing slash; empty when unset or just '/'."""
        segment = (self.api_prefix or "").strip().strip("/")
        return f"/{segment}" if segment else ""

    @property
    def openai_configured(self) -> bool:
        return bool(self.openai_api_key)

    @property
    def remote_store_configured(self) -> bool:
        return bool((self.api_base_url or "").strip())

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",  # unknown variables are not an error
    )


settings = Settings()
