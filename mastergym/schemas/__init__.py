from mastergym.schemas.membership import (
    BillingPeriod,
    MembershipSnapshot,
    MembershipStatus,
    PlanDefinition,
    PlanDuration,
    ProductConfig,
    ProductRules,
    TenantPlan,
    TenantPlanSettings,
)
