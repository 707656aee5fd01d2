from datetime import datetime, timedelta, timezone

import pytest
import pytz

from mastergym.core.config import get_settings
from mastergym.core.timezone_utils import TimezoneProvider
from mastergym.schemas.membership import ProductRules


COSTA_RICA = "America/Costa_Rica"
NEW_YORK = "America/New_York"


def local_instant(tz_name: str, *fields) -> datetime:
    """Instante UTC de una hora local (sin ambigüedad) en la zona indicada."""
    tz = pytz.timezone(tz_name)
    return tz.localize(datetime(*fields), is_dst=None).astimezone(timezone.utc)


class FixedOffsetProvider(TimezoneProvider):
    """Proveedor determinista: ignora el nombre de zona y aplica un offset fijo."""

    def __init__(self, hours: int = 0, minutes: int = 0):
        self.offset = timedelta(hours=hours, minutes=minutes)
        self.calls = 0

    def wall_clock(self, instant, gym_timezone):
        self.calls += 1
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        local = instant.astimezone(timezone.utc) + self.offset
        return (local.year, local.month, local.day, local.hour, local.minute, local.second)


@pytest.fixture
def rules():
    """Reglas por defecto del tenant: aviso a 5 días, sin gracia."""
    return ProductRules(warning_threshold_days=5)


@pytest.fixture
def fixed_provider():
    return FixedOffsetProvider(hours=-6)


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
