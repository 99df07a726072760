from decimal import Decimal

from pydantic_settings import BaseSettings
from pydantic import Field

from config.company import CompanyConfig


class Settings(BaseSettings):
    # Database
    database_url: str = Field(default="sqlite+aiosqlite:///./rental.db", env="DATABASE_URL")

    # Company defaults (used until a company profile is stored)
    company_name: str = Field(default="Rental Management Corp", env="COMPANY_NAME")
    tax_rate: Decimal = Field(default=Decimal("18"), env="TAX_RATE")
    security_deposit_percent: Decimal = Field(default=Decimal("25"), env="SECURITY_DEPOSIT_PERCENT")
    late_fee_per_day: Decimal = Field(default=Decimal("500"), env="LATE_FEE_PER_DAY")
    currency: str = Field(default="INR", env="CURRENCY")

    # Deadlines
    quotation_validity_days: int = Field(default=7, env="QUOTATION_VALIDITY_DAYS")
    invoice_due_days: int = Field(default=7, env="INVOICE_DUE_DAYS")

    # Logging
    log_level: str = Field(default="INFO", env="LOG_LEVEL")
    log_file: str = Field(default="logs/rental.log", env="LOG_FILE")

    def company_config(self) -> CompanyConfig:
        """Build the configuration object handed to pricing and settlement"""
        return CompanyConfig(
            name=self.company_name,
            tax_rate=self.tax_rate,
            security_deposit_percent=self.security_deposit_percent,
            late_fee_per_day=self.late_fee_per_day,
            currency=self.currency,
            quotation_validity_days=self.quotation_validity_days,
            invoice_due_days=self.invoice_due_days,
        )

    class Config:
        # later files take priority: .env.local overrides .env
        env_file = [".env", ".env.local"]
        env_file_encoding = "utf-8"
        extra = "ignore"


# Global settings instance
settings = Settings()
