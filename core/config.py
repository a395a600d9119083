from pydantic_settings import BaseSettings
from pydantic import ConfigDict

class Settings(BaseSettings):
    model_config = ConfigDict(env_file=".env")

    ENV: str = "development"

    DATABASE_URL: str
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    TOKEN_EXPIRE_MINUTES: int = 60
    # Session cookie
    AUTH_COOKIE_NAME: str = "authToken"
    COOKIE_SECURE: bool = False
    COOKIE_SAMESITE: str = "lax"
    # Payment gateway (Razorpay compatible orders API)
    PAYMENT_API_URL: str = "https://api.razorpay.com/v1"
    PAYMENT_KEY_ID: str
    PAYMENT_KEY_SECRET: str
    PAYMENT_CURRENCY: str = "INR"
    PAYMENT_TIMEOUT_SECONDS: float = 10.0
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:5173"]


settings = Settings()
