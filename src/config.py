"""
Application configuration management.

This module handles all configuration settings for the application.
"""

import logging
from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict

from src.models.salary import SalaryRates


# Stockage
COLLECTION_PAYSLIPS = "payslips"
COLLECTION_EMPLOYEES = "employees"
COLLECTION_COMPANIES = "companies"
COLLECTION_DOCUMENTS = "hr_documents"
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY = 0.2

# Acquisition mensuelle des congés (jours)
ACQUISITION_CONGES = Decimal("2.5")
ACQUISITION_RTT = Decimal("1")

_DEFAULT_RATES = SalaryRates()


class AppSettings(BaseSettings):
    """
    Application environment settings.

    Loads configuration from .env file with strict validation.
    Settings:
        - APP_NAME: Application name
        - ENV: Environment (dev, prod, staging)
        - HOST: Server host address
        - PORT: Server port number
        - DEBUG: Debug mode flag
        - LOG_LEVEL: Root logging level
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    APP_NAME: str = "Paie"
    ENV: str = "dev"
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"


class PayrollSettings(BaseSettings):
    """
    Paramètres de paie.

    Les taux sont des constantes illustratives, surchargeables par
    variables d'environnement préfixées `PAIE_` (ex: PAIE_PENSION_RATE=0.069).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PAIE_",
        case_sensitive=True,
        extra="ignore"
    )

    # Calcul du salaire
    BASE_MONTHLY_HOURS: Decimal = _DEFAULT_RATES.base_monthly_hours
    OVERTIME_DEFAULT_RATE: Decimal = _DEFAULT_RATES.overtime_default_rate
    HEALTH_INSURANCE_RATE: Decimal = _DEFAULT_RATES.health_insurance_rate
    PENSION_RATE: Decimal = _DEFAULT_RATES.pension_rate
    UNEMPLOYMENT_RATE: Decimal = _DEFAULT_RATES.unemployment_rate

    # Acquisition mensuelle des congés (jours)
    CONGES_ACCRUAL: Decimal = ACQUISITION_CONGES
    RTT_ACCRUAL: Decimal = ACQUISITION_RTT

    # Stockage
    STORE_MAX_RETRIES: int = DEFAULT_MAX_RETRIES
    STORE_RETRY_DELAY: float = DEFAULT_RETRY_DELAY
    PAYSLIPS_COLLECTION: str = COLLECTION_PAYSLIPS
    EMPLOYEES_COLLECTION: str = COLLECTION_EMPLOYEES
    COMPANIES_COLLECTION: str = COLLECTION_COMPANIES
    DOCUMENTS_COLLECTION: str = COLLECTION_DOCUMENTS

    def to_rates(self) -> SalaryRates:
        """Construit la configuration immuable passée au calculateur."""
        return SalaryRates(
            base_monthly_hours=self.BASE_MONTHLY_HOURS,
            overtime_default_rate=self.OVERTIME_DEFAULT_RATE,
            health_insurance_rate=self.HEALTH_INSURANCE_RATE,
            pension_rate=self.PENSION_RATE,
            unemployment_rate=self.UNEMPLOYMENT_RATE,
        )


def configure_logging(settings: AppSettings) -> None:
    """Applique le niveau de log de l'application."""
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


app_settings = AppSettings()  # type: ignore
payroll_settings = PayrollSettings()  # type: ignore
