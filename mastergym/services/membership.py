"""
Cálculo de vencimiento y estado de membresías.

Una membresía es válida durante todo el día civil de vencimiento: la fecha de
fin siempre representa las 23:59:59 en la zona horaria del gimnasio.
"""
from datetime import datetime, timezone
from typing import Optional, Union
import logging

from mastergym.core.exceptions import MembershipValidationError
from mastergym.core.timezone_utils import (
    TimezoneProvider,
    add_days,
    add_months,
    diff_in_days,
    ensure_utc,
    get_civil_date,
    to_absolute_instant,
)
from mastergym.schemas.membership import (
    MembershipSnapshot,
    MembershipStatus,
    PlanDefinition,
    PlanDuration,
    ProductRules,
)

logger = logging.getLogger(__name__)

END_OF_DAY = (23, 59, 59)


def normalize_to_end_of_day(
    instant: datetime,
    gym_timezone: str,
    provider: Optional[TimezoneProvider] = None
) -> datetime:
    """Las 23:59:59 locales del mismo día civil del instante, en UTC."""
    civil = get_civil_date(instant, gym_timezone, provider)
    return to_absolute_instant(civil.year, civil.month, civil.day, *END_OF_DAY, gym_timezone, provider=provider)


def calculate_end_date(
    start_date: datetime,
    plan: Union[PlanDefinition, PlanDuration],
    gym_timezone: str,
    provider: Optional[TimezoneProvider] = None
) -> Optional[datetime]:
    """
    Calcula el vencimiento de una membresía en el calendario del gimnasio.

    Args:
        start_date: Instante de inicio de la membresía
        plan: Plan del catálogo o directamente su duración
        gym_timezone: Zona horaria del gimnasio

    Returns:
        Instante UTC de las 23:59:59 locales del día de vencimiento, o None si
        el plan no vence por calendario (bonos de visitas/sesiones o duración
        sin días ni meses). Si el plan define días y meses, mandan los días.
    """
    if isinstance(plan, PlanDefinition):
        if plan.is_consumption_based:
            return None
        duration = plan.duration
    else:
        duration = plan

    start_civil = get_civil_date(start_date, gym_timezone, provider)

    if duration.days:
        end_civil = add_days(start_civil, duration.days)
    elif duration.months:
        end_civil = add_months(start_civil, duration.months)
    else:
        return None

    end_date = to_absolute_instant(
        end_civil.year, end_civil.month, end_civil.day, *END_OF_DAY, gym_timezone, provider=provider
    )
    logger.debug(
        "Vencimiento calculado: inicio %s (%s) + %s => %s",
        start_civil, gym_timezone, duration, end_date.isoformat()
    )
    return end_date


def get_membership_status(
    now: datetime,
    end_date: Optional[datetime],
    rules: ProductRules,
    gym_timezone: str,
    provider: Optional[TimezoneProvider] = None
) -> MembershipStatus:
    """
    Clasifica una membresía a partir de "ahora" y su vencimiento.

    Los días de gracia no alteran el estado; solo extienden el acceso
    (ver can_access).
    """
    if end_date is None:
        return MembershipStatus.NO_EXPIRATION

    if ensure_utc(now) > ensure_utc(end_date):
        return MembershipStatus.EXPIRED

    days_remaining = diff_in_days(now, end_date, gym_timezone, provider)
    if days_remaining <= rules.warning_threshold_days:
        return MembershipStatus.EXPIRING

    return MembershipStatus.ACTIVE


# === Acceso y reglas de fecha de inicio ===

def calculate_access_deadline(
    end_date: Optional[datetime],
    rules: ProductRules,
    gym_timezone: str,
    provider: Optional[TimezoneProvider] = None
) -> Optional[datetime]:
    """Último instante con acceso: vencimiento + días de gracia, a las 23:59:59 locales."""
    if end_date is None:
        return None
    if not rules.grace_days:
        return ensure_utc(end_date)

    deadline_civil = add_days(get_civil_date(end_date, gym_timezone, provider), rules.grace_days)
    return to_absolute_instant(
        deadline_civil.year, deadline_civil.month, deadline_civil.day, *END_OF_DAY,
        gym_timezone, provider=provider
    )


def can_access(
    now: datetime,
    end_date: Optional[datetime],
    rules: ProductRules,
    gym_timezone: str,
    provider: Optional[TimezoneProvider] = None
) -> bool:
    deadline = calculate_access_deadline(end_date, rules, gym_timezone, provider)
    if deadline is None:
        return True
    return ensure_utc(now) <= deadline


def validate_start_date(
    start_date: datetime,
    now: datetime,
    rules: ProductRules,
    gym_timezone: str,
    provider: Optional[TimezoneProvider] = None
) -> None:
    """
    Verifica la fecha de inicio contra las reglas del producto.

    Raises:
        MembershipValidationError: si la fecha civil de inicio es anterior a hoy
            sin permitir pagos retroactivos, o posterior a hoy sin permitir
            inicios futuros.
    """
    offset = diff_in_days(now, start_date, gym_timezone, provider)
    if offset < 0 and not rules.allow_backdated_payments:
        raise MembershipValidationError(
            f"La fecha de inicio es {-offset} día(s) anterior a hoy y no se permiten pagos retroactivos"
        )
    if offset > 0 and not rules.allow_future_start_date:
        raise MembershipValidationError(
            f"La fecha de inicio es {offset} día(s) posterior a hoy y no se permiten inicios futuros"
        )


def describe_membership(
    start_date: datetime,
    plan: Union[PlanDefinition, PlanDuration],
    rules: ProductRules,
    gym_timezone: str,
    now: Optional[datetime] = None,
    provider: Optional[TimezoneProvider] = None
) -> MembershipSnapshot:
    """
    Resumen calculado de una membresía: vencimiento, estado, días restantes y acceso.

    Se recalcula en cada llamada; no debe cachearse entre días.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    end_date = calculate_end_date(start_date, plan, gym_timezone, provider)
    status = get_membership_status(now, end_date, rules, gym_timezone, provider)

    days_remaining = None
    if end_date is not None and status != MembershipStatus.EXPIRED:
        days_remaining = diff_in_days(now, end_date, gym_timezone, provider)

    return MembershipSnapshot(
        timezone=gym_timezone,
        start_date=get_civil_date(start_date, gym_timezone, provider),
        end_date=end_date,
        access_until=calculate_access_deadline(end_date, rules, gym_timezone, provider),
        status=status,
        days_remaining=days_remaining,
        can_access=can_access(now, end_date, rules, gym_timezone, provider),
    )
