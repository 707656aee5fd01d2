"""
Services module for MasterGym

Business logic for membership plans: expiration dates, status classification
and the tenant plan catalog. Services are pure functions over the schemas.
"""

from mastergym.services.membership import (
    calculate_access_deadline,
    calculate_end_date,
    can_access,
    describe_membership,
    get_membership_status,
    normalize_to_end_of_day,
    validate_start_date,
)
from mastergym.services.plan_catalog import (
    UNIVERSAL_PLANS,
    PlanId,
    get_enabled_plans,
    get_plan,
    get_plan_or_raise,
    get_visible_plans,
)
