from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import List
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

class Settings(BaseSettings):
    # AI API Keys
    ANTHROPIC_API_KEY: str = os.getenv("ANTHROPIC_API_KEY", "")

    # Script analysis generation
    ANALYSIS_MODEL: str = os.getenv("ANALYSIS_MODEL", "claude-sonnet-4-5")
    ANALYSIS_MAX_TOKENS: int = int(os.getenv("ANALYSIS_MAX_TOKENS", "16000"))
    # Extended thinking budget; 0 disables thinking. Must stay below ANALYSIS_MAX_TOKENS.
    ANALYSIS_THINKING_BUDGET: int = int(os.getenv("ANALYSIS_THINKING_BUDGET", "8000"))
    ANALYSIS_RESPONSE_LANGUAGE: str = os.getenv("ANALYSIS_RESPONSE_LANGUAGE", "Chinese")

    # Redis settings (persisted analysis state)
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    ANALYSIS_STATE_KEY: str = os.getenv("ANALYSIS_STATE_KEY", "scriptAnalysisData")

    # Request limits
    MAX_UPLOAD_BYTES: int = int(os.getenv("MAX_UPLOAD_BYTES", str(5 * 1024 * 1024)))
    ANALYZE_RATE_LIMIT: str = os.getenv("ANALYZE_RATE_LIMIT", "10/minute")
    RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"

    # Comma-separated list of front-end origins
    CORS_ORIGINS: str = os.getenv(
        "CORS_ORIGINS",
        "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173"
    )

    @property
    def cors_origin_list(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"  # Allow extra fields from .env that aren't defined in Settings

@lru_cache()
def get_settings() -> Settings:
    return Settings()

# Create settings instance
settings = get_settings()
