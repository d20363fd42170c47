import os
import logging
from decimal import Decimal
from pydantic import BaseModel, Field
from typing import Optional
from dotenv import load_dotenv

load_dotenv()

class PayrollSettings(BaseModel):
    # Statutory contribution ceilings
    ow_ceiling: Decimal = Field(default=Decimal(os.getenv("CPF_OW_CEILING", "8000")))
    annual_ceiling: Decimal = Field(default=Decimal(os.getenv("CPF_ANNUAL_CEILING", "102000")))
    income_tax_rate: Decimal = Field(default=Decimal(os.getenv("INCOME_TAX_RATE", "0.15")))
    payment_day: int = int(os.getenv("PAYMENT_DAY", "28"))
    cron_secret: Optional[str] = Field(default=os.getenv("CRON_SECRET"))

class Config(BaseModel):
    app_name: str = "HR Leave & Payroll Engine"
    environment: str = os.getenv("APP_ENV", "development")
    api_prefix: str = "/api"

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./database.db")

    # Auth
    secret_key: str = os.getenv("SECRET_KEY", "dev-only-insecure-key-DO-NOT-USE-IN-PROD")
    jwt_algorithm: str = os.getenv("JWT_ALGORITHM", "HS256")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))  # 24 hours

    # Payroll
    payroll: PayrollSettings = PayrollSettings()

    version: str = "1.0.0"
    request_id_header: str = "X-Request-ID"

    rate_limit_per_minute: int = int(os.getenv("RATE_LIMIT_PER_MINUTE", "60"))

settings = Config()

# --- Startup Validation for Production ---
_logger = logging.getLogger(__name__)
if settings.environment not in ("development", "testing"):
    if "dev-only" in settings.secret_key or "change-it" in settings.secret_key:
        raise RuntimeError(
            "FATAL: SECRET_KEY must be set for non-development environments. "
            "Set it as an environment variable."
        )
elif "dev-only" in settings.secret_key:
    _logger.warning("⚠ Using insecure default SECRET_KEY — only acceptable in development.")
