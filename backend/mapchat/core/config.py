from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    LOGGER: int = 20
    LOG_DIRECTORY: str = "logs"
    LOG_FILE: str = "app.log"
    LOG_MAX_BYTES: int = 10 * 1024 * 1024
    LOG_BACKUP_COUNT: int = 5

    # Google Maps Configuration
    GOOGLE_MAPS_API_KEY: str = ""
    MAPS_BASE_URL: str = "https://maps.googleapis.com/maps/api"
    MAPS_TIMEOUT: float = 10.0

    # LLM Provider Selection
    LLM_PROVIDER: str = "ollama"  # Options: ollama, openai

    # Ollama Configuration (native API)
    OLLAMA_BASE_URL: str = "http://localhost:11434"
    OLLAMA_MODEL: str = "phi3:mini"

    # OpenAI-compatible Configuration
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    OPENAI_API_KEY: str = "your-key-here"
    OPENAI_MODEL: str = "gpt-4o-mini"

    # Chat turn budgets
    INTENT_TIMEOUT: float = 3.0
    INTENT_MAX_TOKENS: int = 50
    NARRATION_TIMEOUT: float = 10.0
    NARRATION_MAX_TOKENS: int = 150
    NARRATION_TEMPERATURE: float = 0.7
    NARRATION_PLACES_LIMIT: int = 5

    # HTTP surface
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:8080,http://localhost:8501"
    RATE_LIMIT_WINDOW_SECONDS: int = 900  # 15 minutes
    RATE_LIMIT_MAX_REQUESTS: int = 100

    model_config = SettingsConfigDict(
        # Look for .env in the current folder OR the parent folder
        env_file=(".env", "../.env"),
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def allowed_origins(self) -> list[str]:
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]

settings = Settings()
