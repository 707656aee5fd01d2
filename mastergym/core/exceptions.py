"""
Excepciones del núcleo de membresías.
"""


class MembershipCoreError(Exception):
    """Base para todos los errores del núcleo de membresías."""
    pass


class InvalidTimezoneError(MembershipCoreError, ValueError):
    """Raised when a tenant timezone is not a known IANA zone."""

    def __init__(self, timezone_name: str):
        self.timezone_name = timezone_name
        super().__init__(f"Zona horaria desconocida: {timezone_name!r}")


class LocalTimeResolutionError(MembershipCoreError):
    """Raised when a wall-clock time cannot be resolved to a single instant."""

    def __init__(self, wall_clock: tuple, timezone_name: str, message: str):
        self.wall_clock = wall_clock
        self.timezone_name = timezone_name
        super().__init__(message)


class NonExistentLocalTimeError(LocalTimeResolutionError):
    """La hora local cae en el salto de un cambio de horario (spring-forward)."""
    pass


class AmbiguousLocalTimeError(LocalTimeResolutionError):
    """La hora local ocurre dos veces por un cambio de horario (fall-back)."""

    def __init__(self, wall_clock: tuple, timezone_name: str, message: str, candidates=None):
        self.candidates = list(candidates or [])
        super().__init__(wall_clock, timezone_name, message)


class MembershipValidationError(MembershipCoreError):
    """Raised when membership input violates the tenant product rules."""
    pass


class PlanNotFoundError(MembershipCoreError):
    """Raised when a plan id is not part of the catalog."""

    def __init__(self, plan_id: str):
        self.plan_id = plan_id
        super().__init__(f"Plan {plan_id!r} no encontrado en el catálogo")
