from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    database_url: str = "sqlite+aiosqlite:///./quickstay.db"
    log_level: str = "INFO"

    # Identity provider (Clerk)
    clerk_jwks_url: str
    clerk_secret_key: str
    clerk_issuer: str = ""
    clerk_api_url: str = "https://api.clerk.com/v1"
    jwt_algorithms: list[str] = ["RS256"]
    jwks_refresh_interval: float = 60.0
    profile_retry_delay: float = 5.0

    # Payment gateway (Stripe)
    stripe_secret_key: str
    stripe_webhook_secret: str = ""
    currency: str = "usd"
    currency_symbol: str = "$"
    frontend_url: str = "http://localhost:5173"

    # Transactional email
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    sender_email: str = ""
    email_max_retries: int = 3
    email_retry_delay: float = 2.0
