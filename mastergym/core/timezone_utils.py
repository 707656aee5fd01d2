"""
Utilidades de calendario y zonas horarias para el cálculo de membresías.

Todas las funciones trabajan con instantes absolutos (datetime aware en UTC)
y fechas civiles (``datetime.date``) observadas en la zona horaria del gimnasio.
Un datetime naive recibido como instante se interpreta como UTC.
"""
import calendar
import logging
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional, Tuple

import pytz

from mastergym.core.exceptions import (
    AmbiguousLocalTimeError,
    InvalidTimezoneError,
    NonExistentLocalTimeError,
)

logger = logging.getLogger(__name__)

# Límite de seguridad; las zonas reales convergen en 2 iteraciones como máximo
MAX_RESOLVE_ITERATIONS = 6

WallClock = Tuple[int, int, int, int, int, int]


def ensure_utc(instant: datetime) -> datetime:
    """
    Normaliza un instante a UTC.

    - Si es naive, se asume que ya está en UTC.
    - Si es aware, se convierte a UTC preservando el instante exacto.
    """
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def convert_utc_to_local(utc_dt: datetime, gym_timezone: str) -> datetime:
    """
    Convierte un datetime UTC a hora local del gimnasio.

    Args:
        utc_dt: Datetime en UTC (naive se trata como UTC)
        gym_timezone: Zona horaria del gimnasio

    Returns:
        Datetime aware en la zona horaria del gimnasio
    """
    tz = pytz.timezone(gym_timezone)
    return ensure_utc(utc_dt).astimezone(tz)


def validate_timezone(gym_timezone: str) -> str:
    """Verifica que la zona horaria exista en la base de datos IANA de pytz."""
    if not gym_timezone or gym_timezone not in pytz.all_timezones_set:
        raise InvalidTimezoneError(gym_timezone)
    return gym_timezone


class TimezoneProvider:
    """
    Proveedor de datos de zona horaria.

    Es la única dependencia del núcleo con la base de datos de zonas; se puede
    sustituir por un proveedor determinista en pruebas.
    """

    def wall_clock(self, instant: datetime, gym_timezone: str) -> WallClock:
        """Campos (año, mes, día, hora, minuto, segundo) del instante en la zona."""
        raise NotImplementedError

    def civil_date_of(self, instant: datetime, gym_timezone: str) -> date:
        year, month, day = self.wall_clock(instant, gym_timezone)[:3]
        return date(year, month, day)


class PytzTimezoneProvider(TimezoneProvider):
    """Proveedor por defecto respaldado por pytz."""

    def wall_clock(self, instant: datetime, gym_timezone: str) -> WallClock:
        local = convert_utc_to_local(instant, gym_timezone)
        return (local.year, local.month, local.day, local.hour, local.minute, local.second)


_default_provider = PytzTimezoneProvider()


def get_timezone_provider(provider: Optional[TimezoneProvider] = None) -> TimezoneProvider:
    return provider if provider is not None else _default_provider


# === Fechas civiles ===

def get_civil_date(
    instant: datetime,
    gym_timezone: str,
    provider: Optional[TimezoneProvider] = None
) -> date:
    """
    Obtiene la fecha de calendario de un instante tal como se observa en la
    zona horaria del gimnasio.

    Una zona desconocida no se valida aquí: pytz lanza UnknownTimeZoneError.
    """
    return get_timezone_provider(provider).civil_date_of(instant, gym_timezone)


def days_in_month(year: int, month: int) -> int:
    """Último día del mes (considera años bisiestos)."""
    return calendar.monthrange(year, month)[1]


def add_days(civil_date: date, days: int) -> date:
    return civil_date + timedelta(days=days)


def add_months(civil_date: date, months: int) -> date:
    """
    Suma meses a una fecha civil recortando el día al último día del mes destino.

    Ej: 31 de enero + 1 mes => 28 (o 29) de febrero, nunca 3 de marzo.
    """
    total = civil_date.year * 12 + (civil_date.month - 1) + months
    year, month_index = divmod(total, 12)
    month = month_index + 1
    return date(year, month, min(civil_date.day, days_in_month(year, month)))


# === Resolución de hora local a instante absoluto ===

def _pseudo_utc_seconds(fields: WallClock) -> int:
    """Segundos epoch leyendo los campos de reloj como si fueran UTC."""
    return calendar.timegm(fields)


def _from_epoch(seconds: int) -> datetime:
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def _utc_offset_seconds(seconds: int, gym_timezone: str, provider: TimezoneProvider) -> int:
    observed = provider.wall_clock(_from_epoch(seconds), gym_timezone)
    return _pseudo_utc_seconds(observed) - seconds


def _matching_instants(
    desired: int,
    guess: int,
    gym_timezone: str,
    provider: TimezoneProvider
) -> List[int]:
    # Los offsets vigentes un día antes y después cubren ambos lados de una transición
    offsets = {
        _utc_offset_seconds(guess + shift, gym_timezone, provider)
        for shift in (-86400, 0, 86400)
    }
    matches = set()
    for offset in offsets:
        candidate = desired - offset
        observed = provider.wall_clock(_from_epoch(candidate), gym_timezone)
        if _pseudo_utc_seconds(observed) == desired:
            matches.add(candidate)
    return sorted(matches)


def to_absolute_instant(
    year: int,
    month: int,
    day: int,
    hour: int,
    minute: int,
    second: int,
    gym_timezone: str,
    provider: Optional[TimezoneProvider] = None,
    strict: bool = False
) -> datetime:
    """
    Convierte una hora de reloj en la zona del gimnasio a un instante UTC.

    Se parte de los campos leídos como UTC y se corrige iterativamente: en cada
    paso se lee el instante estimado en la zona y se desplaza por la diferencia
    entre el reloj deseado y el observado. El bucle está acotado por
    MAX_RESOLVE_ITERATIONS.

    Args:
        strict: Si es True, lanza NonExistentLocalTimeError cuando la hora cae
            en el salto de un cambio de horario y AmbiguousLocalTimeError
            cuando ocurre dos veces. Si es False se devuelve un instante
            consistente sin garantizar de qué lado de la transición queda.

    Returns:
        Datetime aware en UTC
    """
    tz_provider = get_timezone_provider(provider)
    wall_clock = (year, month, day, hour, minute, second)
    # Valida los campos (lanza ValueError para fechas imposibles)
    desired_dt = datetime(year, month, day, hour, minute, second, tzinfo=timezone.utc)
    desired = _pseudo_utc_seconds(wall_clock)

    guess = desired
    for _ in range(MAX_RESOLVE_ITERATIONS):
        observed = tz_provider.wall_clock(_from_epoch(guess), gym_timezone)
        delta = desired - _pseudo_utc_seconds(observed)
        if delta == 0:
            break
        guess += delta
    else:
        logger.debug(
            "Resolución de %s en %s no convergió tras %d iteraciones",
            wall_clock, gym_timezone, MAX_RESOLVE_ITERATIONS
        )

    if strict:
        matches = _matching_instants(desired, guess, gym_timezone, tz_provider)
        if not matches:
            raise NonExistentLocalTimeError(
                wall_clock, gym_timezone,
                f"La hora local {desired_dt:%Y-%m-%d %H:%M:%S} no existe en {gym_timezone}"
            )
        if len(matches) > 1:
            raise AmbiguousLocalTimeError(
                wall_clock, gym_timezone,
                f"La hora local {desired_dt:%Y-%m-%d %H:%M:%S} es ambigua en {gym_timezone}",
                candidates=[_from_epoch(m) for m in matches]
            )
        guess = matches[0]

    return _from_epoch(guess)


# === Diferencia en días de calendario ===

def diff_in_days(
    instant_a: datetime,
    instant_b: datetime,
    gym_timezone: str,
    provider: Optional[TimezoneProvider] = None
) -> int:
    """
    Días de calendario entre dos instantes observados en la zona del gimnasio.

    Se comparan las fechas civiles, no los segundos transcurridos, para que
    los cambios de horario no alteren el conteo. Positivo si b es posterior.
    """
    tz_provider = get_timezone_provider(provider)
    date_a = tz_provider.civil_date_of(instant_a, gym_timezone)
    date_b = tz_provider.civil_date_of(instant_b, gym_timezone)
    return (date_b - date_a).days
