import pytest

from mastergym.core.exceptions import PlanNotFoundError
from mastergym.schemas.membership import (
    BillingPeriod,
    ProductConfig,
    ProductRules,
    TenantPlanSettings,
)
from mastergym.services.plan_catalog import (
    UNIVERSAL_PLANS,
    PlanId,
    get_enabled_plans,
    get_plan,
    get_plan_or_raise,
    get_visible_plans,
)


@pytest.fixture
def config():
    return ProductConfig(
        timezone="America/Costa_Rica",
        rules=ProductRules(warning_threshold_days=5),
        membership_plans=dict(UNIVERSAL_PLANS),
        enabled_plans={
            "MONTHLY": TenantPlanSettings(enabled=True, price=25000, currency_code="crc"),
            "ANNUAL": TenantPlanSettings(enabled=True, visible=False, price=250000),
            "DAY_PASS_10": TenantPlanSettings(enabled=False, visible=True, price=15000),
            "DAILY": TenantPlanSettings(enabled=True, price=3000),
        },
    )


class TestUniversalCatalog:

    def test_every_plan_id_is_in_catalog(self):
        assert set(UNIVERSAL_PLANS) == {plan_id.value for plan_id in PlanId}

    def test_catalog_keys_match_plan_ids(self):
        for plan_id, plan in UNIVERSAL_PLANS.items():
            assert plan.id == plan_id

    def test_packs_are_consumption_based(self):
        packs = [p for p in UNIVERSAL_PLANS.values() if p.is_consumption_based]
        assert {p.id for p in packs} == {"DAY_PASS_10", "DAY_PASS_20", "SESSION_8", "SESSION_12"}
        assert all(not p.duration.has_calendar_expiration for p in packs)

    def test_time_plans_have_calendar_expiration(self):
        time_plans = [p for p in UNIVERSAL_PLANS.values() if not p.is_consumption_based]
        assert all(p.duration.has_calendar_expiration for p in time_plans)

    def test_monthly_and_trial_definitions(self):
        assert UNIVERSAL_PLANS["MONTHLY"].duration.months == 1
        assert UNIVERSAL_PLANS["MONTHLY"].billing_period == BillingPeriod.MONTH
        assert UNIVERSAL_PLANS["FREE_TRIAL"].flags == {"isTrial": True}
        assert UNIVERSAL_PLANS["BIWEEKLY"].duration.days == 15


class TestTenantPlans:

    def test_plan_with_settings(self, config):
        plan = get_plan(config, "MONTHLY")
        assert plan.enabled is True
        assert plan.visible is True  # hereda de enabled
        assert plan.price == 25000
        assert plan.currency_code == "CRC"
        assert plan.label == "Mensual"

    def test_explicit_visibility_wins(self, config):
        assert get_plan(config, "ANNUAL").visible is False
        assert get_plan(config, "DAY_PASS_10").visible is True

    def test_plan_without_settings_is_disabled(self, config):
        plan = get_plan(config, "WEEKLY")
        assert plan.enabled is False
        assert plan.visible is False
        assert plan.price is None

    def test_unknown_plan(self, config):
        assert get_plan(config, "LIFETIME") is None
        with pytest.raises(PlanNotFoundError) as exc_info:
            get_plan_or_raise(config, "LIFETIME")
        assert exc_info.value.plan_id == "LIFETIME"

    def test_get_plan_or_raise_returns_plan(self, config):
        assert get_plan_or_raise(config, "DAILY").price == 3000

    def test_enabled_plans_follow_catalog_order(self, config):
        assert [p.id for p in get_enabled_plans(config)] == ["DAILY", "MONTHLY", "ANNUAL"]

    def test_visible_plans(self, config):
        assert [p.id for p in get_visible_plans(config)] == ["DAILY", "MONTHLY", "DAY_PASS_10"]

    def test_empty_tenant_configuration(self):
        config = ProductConfig(rules=ProductRules(warning_threshold_days=5), membership_plans=dict(UNIVERSAL_PLANS))
        assert get_enabled_plans(config) == []
        assert get_visible_plans(config) == []
