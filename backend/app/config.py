# app/config.py
import os
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file


def _split_csv(raw: str) -> list[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings(BaseModel):
    # General app settings
    APP_NAME: str = os.getenv("APP_NAME", "OKRFlow API")
    env: str = os.getenv("ENV", "dev")

    # Host & Port settings
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8000"))

    # CORS origins for frontend
    CORS_ORIGINS: list[str] = _split_csv(
        os.getenv("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173")
    )

    # Base URL used for links inside notification emails
    frontend_url: str = os.getenv("FRONTEND_URL", "http://localhost:5173")

    # LLM chat settings (goal Q&A)
    llm_provider: str = os.getenv("LLM_PROVIDER", "anthropic")  # anthropic | openai
    llm_model: str = os.getenv("LLM_MODEL", "claude-3-5-sonnet-20241022")
    llm_max_attempts: int = int(os.getenv("LLM_MAX_ATTEMPTS", "3"))
    llm_retry_delay: float = float(os.getenv("LLM_RETRY_DELAY", "1.0"))  # seconds between attempts
    llm_max_tokens: int = int(os.getenv("LLM_MAX_TOKENS", "1024"))
    openai_api_key: str | None = os.getenv("OPENAI_API_KEY")
    openai_api_url: str = os.getenv("OPENAI_API_URL", "https://api.openai.com/v1/chat/completions")
    anthropic_api_key: str | None = os.getenv("ANTHROPIC_API_KEY")
    anthropic_api_url: str = os.getenv("ANTHROPIC_API_URL", "https://api.anthropic.com/v1/messages")
    anthropic_version: str = os.getenv("ANTHROPIC_VERSION", "2023-06-01")

    # Postmark settings (transactional email); email is logged only when the token is missing
    postmark_api_token: str | None = os.getenv("POSTMARK_API_TOKEN")
    postmark_api_url: str = os.getenv("POSTMARK_API_URL", "https://api.postmarkapp.com/email")
    postmark_from_email: str = os.getenv("POSTMARK_FROM_EMAIL", "noreply@okrflow.com")

    # Invites
    invite_expire_days: int = int(os.getenv("INVITE_EXPIRE_DAYS", "7"))

settings = Settings()  # Instantiate configuration
