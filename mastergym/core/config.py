from typing import Dict, Optional
from functools import lru_cache
import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from mastergym.core.timezone_utils import validate_timezone
from mastergym.schemas.membership import ProductConfig, ProductRules, TenantPlanSettings
from mastergym.services.plan_catalog import UNIVERSAL_PLANS

# Configurar el logger
logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"  # Permitir campos extra en .env
    )

    # Información del proyecto
    PROJECT_NAME: str = "MasterGym"
    PROJECT_DESCRIPTION: str = "Cálculo de vencimientos y estado de membresías de gimnasio"
    VERSION: str = "0.1.0"

    # Debug mode
    DEBUG_MODE: bool = False

    # Logging
    LOG_TO_FILE: bool = False
    LOG_DIR: str = "logs"

    # Zona horaria del tenant (IANA)
    DEFAULT_TIMEZONE: str = "UTC"

    # Reglas de producto
    WARNING_THRESHOLD_DAYS: int = Field(5, ge=0)
    GRACE_DAYS: int = Field(0, ge=0)
    ALLOW_BACKDATED_PAYMENTS: bool = False
    ALLOW_FUTURE_START_DATE: bool = False

    # Planes habilitados por el tenant, JSON: {"MONTHLY": {"enabled": true, "price": 25000}}
    ENABLED_PLANS: Dict[str, TenantPlanSettings] = {}

    @field_validator("DEFAULT_TIMEZONE")
    def check_default_timezone(cls, v: str) -> str:
        """Las zonas inválidas se rechazan al cargar la configuración, no en los cálculos."""
        return validate_timezone(v)


@lru_cache()
def get_settings() -> Settings:
    settings = Settings()
    logger.info("Configuración cargada correctamente")
    return settings


def get_product_rules(settings: Optional[Settings] = None) -> ProductRules:
    settings = settings or get_settings()
    return ProductRules(
        warning_threshold_days=settings.WARNING_THRESHOLD_DAYS,
        grace_days=settings.GRACE_DAYS,
        allow_backdated_payments=settings.ALLOW_BACKDATED_PAYMENTS,
        allow_future_start_date=settings.ALLOW_FUTURE_START_DATE,
    )


def get_product_config(settings: Optional[Settings] = None) -> ProductConfig:
    """Configuración de producto del tenant a partir de los settings y el catálogo universal."""
    settings = settings or get_settings()
    unknown = set(settings.ENABLED_PLANS) - set(UNIVERSAL_PLANS)
    if unknown:
        logger.warning(f"ENABLED_PLANS contiene planes fuera del catálogo: {sorted(unknown)}")

    return ProductConfig(
        timezone=settings.DEFAULT_TIMEZONE,
        rules=get_product_rules(settings),
        membership_plans=dict(UNIVERSAL_PLANS),
        enabled_plans=settings.ENABLED_PLANS,
    )
