"""
Catálogo universal de planes y su combinación con la configuración de cada tenant.
"""
from typing import List, Optional
import enum
import logging

from mastergym.core.exceptions import PlanNotFoundError
from mastergym.schemas.membership import (
    BillingPeriod,
    PlanDefinition,
    PlanDuration,
    ProductConfig,
    TenantPlan,
)

logger = logging.getLogger(__name__)


class PlanId(str, enum.Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    BIWEEKLY = "BIWEEKLY"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    SEMIANNUAL = "SEMIANNUAL"
    ANNUAL = "ANNUAL"
    DUO = "DUO"
    COUPLE = "COUPLE"
    YOUTH = "YOUTH"
    SENIOR = "SENIOR"
    STUDENT = "STUDENT"
    CORPORATE = "CORPORATE"
    FAMILY = "FAMILY"
    DAY_PASS_10 = "DAY_PASS_10"
    DAY_PASS_20 = "DAY_PASS_20"
    SESSION_8 = "SESSION_8"
    SESSION_12 = "SESSION_12"
    FREE_TRIAL = "FREE_TRIAL"
    OFF_PEAK = "OFF_PEAK"


def _plan(plan_id: PlanId, label: str, billing_period: BillingPeriod, description: str,
          flags: Optional[dict] = None, **duration) -> PlanDefinition:
    return PlanDefinition(
        id=plan_id.value,
        label=label,
        billing_period=billing_period,
        duration=PlanDuration(**duration),
        flags=flags or {},
        description=description,
    )


_CATALOG = [
    # Planes básicos por tiempo
    _plan(PlanId.DAILY, "Diaria", BillingPeriod.DAY, "Acceso por un día completo", days=1),
    _plan(PlanId.WEEKLY, "Semanal", BillingPeriod.WEEK, "Acceso por 7 días", days=7),
    _plan(PlanId.BIWEEKLY, "Quincenal", BillingPeriod.BIWEEKLY, "Acceso por 15 días", days=15),
    _plan(PlanId.MONTHLY, "Mensual", BillingPeriod.MONTH, "Membresía estándar mes a mes", months=1),
    _plan(PlanId.QUARTERLY, "Trimestral", BillingPeriod.QUARTER, "Pago cada 3 meses", months=3),
    _plan(PlanId.SEMIANNUAL, "Semestral", BillingPeriod.HALF_YEAR, "Pago cada 6 meses", months=6),
    _plan(PlanId.ANNUAL, "Anual", BillingPeriod.YEAR, "Pago anual con mejor precio", months=12),

    # Planes especiales / demográficos
    _plan(PlanId.DUO, "Plan Dúo", BillingPeriod.MONTH, "Para dos personas entrenando juntas",
          flags={"isDuo": True}, months=1),
    _plan(PlanId.COUPLE, "Pareja", BillingPeriod.MONTH, "Plan mensual para parejas",
          flags={"isCouple": True}, months=1),
    _plan(PlanId.YOUTH, "Juvenil", BillingPeriod.MONTH, "Tarifa para menores de edad",
          flags={"isYouth": True}, months=1),
    _plan(PlanId.SENIOR, "Adulto Mayor", BillingPeriod.MONTH, "Tarifa para tercera edad",
          flags={"isSenior": True}, months=1),
    _plan(PlanId.STUDENT, "Estudiante", BillingPeriod.MONTH, "Requiere carnet de estudiante",
          flags={"isStudent": True}, months=1),
    _plan(PlanId.CORPORATE, "Corporativo", BillingPeriod.MONTH, "Plan empresarial",
          flags={"isCorporate": True}, months=1),
    _plan(PlanId.FAMILY, "Familiar", BillingPeriod.MONTH, "Grupo familiar",
          flags={"isFamily": True}, months=1),

    # Pases y paquetes
    _plan(PlanId.DAY_PASS_10, "Bono 10 Visitas", BillingPeriod.VISIT_PACK,
          "10 accesos sin caducidad inmediata", visits=10),
    _plan(PlanId.DAY_PASS_20, "Bono 20 Visitas", BillingPeriod.VISIT_PACK,
          "20 accesos sin caducidad inmediata", visits=20),
    _plan(PlanId.SESSION_8, "Pack 8 Sesiones", BillingPeriod.SESSION_PACK, "8 clases guiadas", sessions=8),
    _plan(PlanId.SESSION_12, "Pack 12 Sesiones", BillingPeriod.SESSION_PACK, "12 clases guiadas", sessions=12),

    # Otros
    _plan(PlanId.FREE_TRIAL, "Prueba Gratuita", BillingPeriod.DAY, "Acceso de prueba",
          flags={"isTrial": True}, days=1),
    _plan(PlanId.OFF_PEAK, "Horario Valle", BillingPeriod.MONTH, "Acceso restringido a horas valle",
          flags={"isOffPeak": True}, months=1),
]

UNIVERSAL_PLANS = {plan.id: plan for plan in _CATALOG}


def get_plan(config: ProductConfig, plan_id: str) -> Optional[TenantPlan]:
    """
    Combina la definición base de un plan con la configuración del tenant.

    - Si el plan no existe en el catálogo del tenant, retorna None.
    - Sin configuración del tenant el plan queda deshabilitado, oculto y sin precio.
    - Si visible no está definido, hereda el valor de enabled.
    """
    base_plan = config.membership_plans.get(plan_id)
    if base_plan is None:
        return None

    tenant_settings = config.enabled_plans.get(plan_id)
    if tenant_settings is None:
        return TenantPlan(**base_plan.model_dump(), enabled=False, visible=False, price=None)

    settings_data = tenant_settings.model_dump()
    if settings_data["visible"] is None:
        settings_data["visible"] = tenant_settings.enabled
    return TenantPlan(**base_plan.model_dump(), **settings_data)


def get_plan_or_raise(config: ProductConfig, plan_id: str) -> TenantPlan:
    plan = get_plan(config, plan_id)
    if plan is None:
        logger.warning(f"Plan solicitado no existe en el catálogo: {plan_id}")
        raise PlanNotFoundError(plan_id)
    return plan


def get_enabled_plans(config: ProductConfig) -> List[TenantPlan]:
    """Planes habilitados, en el orden del catálogo"""
    plans = (get_plan(config, plan_id) for plan_id in config.membership_plans)
    return [plan for plan in plans if plan is not None and plan.enabled]


def get_visible_plans(config: ProductConfig) -> List[TenantPlan]:
    """Planes visibles (pantallas de venta / landing)"""
    plans = (get_plan(config, plan_id) for plan_id in config.membership_plans)
    return [plan for plan in plans if plan is not None and plan.visible]
