from pydantic_settings import BaseSettings
from pydantic import ConfigDict

class Settings(BaseSettings):
    model_config = ConfigDict(env_file=".env")

    ENV: str = "development"

    DATABASE_URL: str
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    # Checkout
    REFERENCE_MAX_ATTEMPTS: int = 5
    # Placeholder until a payment gateway confirms non-cash payments
    AUTO_CAPTURE_NON_CASH_PAYMENTS: bool = True
    CHECKOUT_RATE_LIMIT: str = "10/minute"


settings = Settings()
