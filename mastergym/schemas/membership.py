from typing import Dict, Optional
from datetime import date, datetime
import enum

from pydantic import BaseModel, Field, field_validator

from mastergym.core.timezone_utils import validate_timezone


class MembershipStatus(str, enum.Enum):
    """
    Estado derivado de una membresía. Nunca se persiste: se recalcula en cada
    lectura a partir de "ahora" y la fecha de vencimiento.
    """
    ACTIVE = "ACTIVE"                # Vigente
    EXPIRING = "EXPIRING"            # Vence pronto (dentro del umbral de aviso)
    EXPIRED = "EXPIRED"              # Vencida
    NO_EXPIRATION = "NO_EXPIRATION"  # Sin vencimiento de calendario (bonos de visitas/sesiones)


class BillingPeriod(str, enum.Enum):
    """Periodo de facturación de un plan del catálogo."""
    DAY = "DAY"
    WEEK = "WEEK"
    BIWEEKLY = "BIWEEKLY"
    MONTH = "MONTH"
    QUARTER = "QUARTER"
    HALF_YEAR = "HALF_YEAR"
    YEAR = "YEAR"
    VISIT_PACK = "VISIT_PACK"
    SESSION_PACK = "SESSION_PACK"
    CUSTOM = "CUSTOM"


CONSUMPTION_PERIODS = frozenset({BillingPeriod.VISIT_PACK, BillingPeriod.SESSION_PACK})


# === Esquemas de planes ===

class PlanDuration(BaseModel):
    """Duración de un plan. Solo days/months generan vencimiento de calendario."""
    days: Optional[int] = Field(None, ge=0, description="Duración en días")
    months: Optional[int] = Field(None, ge=0, description="Duración en meses")
    visits: Optional[int] = Field(None, ge=0, description="Cantidad de visitas del bono")
    sessions: Optional[int] = Field(None, ge=0, description="Cantidad de sesiones del paquete")

    model_config = {"frozen": True}

    @property
    def has_calendar_expiration(self) -> bool:
        return bool(self.days) or bool(self.months)


class PlanDefinition(BaseModel):
    """Plan del catálogo universal, independiente de cualquier cliente"""
    id: str = Field(..., min_length=1, description="Identificador del plan")
    label: str = Field(..., min_length=1, max_length=100, description="Nombre visible")
    billing_period: BillingPeriod
    duration: PlanDuration = Field(default_factory=PlanDuration)
    flags: Dict[str, bool] = Field(default_factory=dict, description="Marcas: isFamily, isTrial, ...")
    description: Optional[str] = None

    model_config = {"frozen": True}

    @property
    def is_consumption_based(self) -> bool:
        """Bonos de visitas o sesiones: no vencen por calendario"""
        return self.billing_period in CONSUMPTION_PERIODS


class TenantPlanSettings(BaseModel):
    """Configuración de un plan para un tenant (gimnasio)"""
    enabled: bool = False
    visible: Optional[bool] = Field(None, description="Si es None hereda el valor de enabled")
    price: Optional[float] = Field(None, ge=0)
    currency_code: Optional[str] = Field(None, min_length=3, max_length=3)
    notes: Optional[str] = Field(None, max_length=500)

    @field_validator("currency_code")
    @classmethod
    def validate_currency(cls, v):
        return v.upper() if v else v


class TenantPlan(PlanDefinition):
    """Plan del catálogo combinado con la configuración del tenant"""
    enabled: bool
    visible: bool
    price: Optional[float] = None
    currency_code: Optional[str] = None
    notes: Optional[str] = None


# === Reglas y configuración del producto ===

class ProductRules(BaseModel):
    """Reglas de negocio del tenant. Entrada de solo lectura para los cálculos."""
    warning_threshold_days: int = Field(..., ge=0, description="Días antes del vencimiento para avisar")
    grace_days: int = Field(0, ge=0, description="Días de acceso extra tras el vencimiento")
    allow_backdated_payments: bool = False
    allow_future_start_date: bool = False

    model_config = {"frozen": True}


class ProductConfig(BaseModel):
    """Configuración de producto de un tenant"""
    timezone: str = Field("UTC", description="Zona horaria IANA, ej: America/Costa_Rica")
    rules: ProductRules
    membership_plans: Dict[str, PlanDefinition] = Field(default_factory=dict)
    enabled_plans: Dict[str, TenantPlanSettings] = Field(default_factory=dict)

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, v):
        return validate_timezone(v)


# === Esquemas de respuesta ===

class MembershipSnapshot(BaseModel):
    """Estado calculado de una membresía para mostrar en UI/API"""
    timezone: str
    start_date: date = Field(..., description="Fecha civil de inicio en la zona del gimnasio")
    end_date: Optional[datetime] = Field(None, description="Vencimiento (23:59:59 local) en UTC")
    access_until: Optional[datetime] = Field(None, description="Fin del acceso incluyendo días de gracia")
    status: MembershipStatus
    days_remaining: Optional[int] = None
    can_access: bool
