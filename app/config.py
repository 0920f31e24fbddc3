import os
from functools import lru_cache
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseModel):
    env: str = os.getenv("ENV", "dev")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Database
    database_url: str = (os.getenv("DATABASE_URL") or "").strip()
    db_allow_sqlite_fallback: bool = os.getenv("DB_ALLOW_SQLITE_FALLBACK", "1") == "1"

    # CORS
    frontend_url: str = os.getenv("FRONTEND_URL", "http://localhost:3000")

    # LLM
    llm_provider: str = os.getenv("LLM_PROVIDER", "openai")  # openai|ollama
    openai_key: str | None = os.getenv("OPENAI_API_KEY")
    openai_model: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    ollama_base: str = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
    ollama_model: str = os.getenv("OLLAMA_MODEL", "llama3.1")

    # Email
    resend_api_key: str = os.getenv("RESEND_API_KEY") or os.getenv("EMAIL_API_KEY", "")
    from_email: str = os.getenv("FROM_EMAIL", "")
    from_name: str = os.getenv("FROM_NAME", "Meeting Notes")
    smtp_host: str = os.getenv("SMTP_HOST", "")
    smtp_port: int = int(os.getenv("SMTP_PORT", "587"))
    smtp_user: str = os.getenv("SMTP_USER", "")
    smtp_pass: str = os.getenv("SMTP_PASS", "")

    # Uploads
    max_upload_mb: int = int(os.getenv("MAX_UPLOAD_MB", "10"))
    max_words: int = int(os.getenv("MAX_WORDS", "10000"))

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.frontend_url.split(",") if o.strip()]

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024

@lru_cache
def get_settings() -> Settings:
    return Settings()
