"""
Plan limits, features and pricing for the subscription tiers.
"""

from typing import Optional, Union

from .config import BASIC_PLAN_PRICE, ENTERPRISE_PLAN_PRICE, PREMIUM_PLAN_PRICE

UNLIMITED = "unlimited"

PLANS = ("basic", "premium", "enterprise")

# Resource quotas per plan (no free plan - firms without a plan get the basic limits)
PLAN_LIMITS = {
    "basic": {"max_cases": 10, "max_clients": 25, "max_documents": 50},
    "premium": {"max_cases": 500, "max_clients": 1000, "max_documents": 5000},
    "enterprise": {"max_cases": UNLIMITED, "max_clients": UNLIMITED, "max_documents": UNLIMITED},
}

_BASIC_FEATURES = [
    "basic_case_management",
    "basic_client_management",
    "basic_calendar",
    "basic_documents",
    "email_support",
]

_PREMIUM_FEATURES = [
    "basic_case_management",
    "basic_client_management",
    "basic_calendar",
    "basic_documents",
    "advanced_case_management",
    "advanced_client_management",
    "advanced_calendar",
    "advanced_documents",
    "document_automation",
    "whatsapp_notifications",
    "email_notifications",
    "priority_support",
    "billing_management",
    "advanced_search",
    "case_templates",
    "client_portal",
    "time_tracking",
    "invoice_generation",
    "data_export",
]

PLAN_FEATURES = {
    "basic": _BASIC_FEATURES,
    "premium": _PREMIUM_FEATURES,
    "enterprise": _PREMIUM_FEATURES
    + [
        "multi_user_management",
        "advanced_reporting",
        "api_access",
        "custom_integrations",
        "dedicated_support",
        "advanced_security",
        "audit_logs",
        "white_labeling",
        "custom_workflows",
        "bulk_operations",
        "advanced_analytics",
        "compliance_tools",
    ],
}

PLAN_PRICES = {
    "basic": BASIC_PLAN_PRICE,
    "premium": PREMIUM_PLAN_PRICE,
    "enterprise": ENTERPRISE_PLAN_PRICE,
}

Limit = Union[int, str]


def normalize_plan(plan: Optional[str]) -> str:
    """Map a stored plan name to a known tier. Missing or unknown plans fall back to basic."""
    if not plan:
        return "basic"
    plan = plan.lower()
    return plan if plan in PLAN_LIMITS else "basic"


def get_plan_limits(plan: Optional[str]) -> dict:
    return PLAN_LIMITS[normalize_plan(plan)]


def get_plan_features(plan: Optional[str]) -> list[str]:
    return PLAN_FEATURES[normalize_plan(plan)]


def calculate_can_add(used: int, limit: Limit) -> bool:
    """A firm can add a resource while it is under its quota."""
    return limit == UNLIMITED or used < limit


def calculate_percentage(used: int, limit: Limit) -> float:
    """Quota usage in percent, capped at 100. Unlimited quotas always report 0."""
    if limit == UNLIMITED:
        return 0
    if not limit:
        return 100
    return min(used / limit * 100, 100)


def build_usage_entry(used: int, limit: Limit) -> dict:
    return {
        "used": used,
        "limit": limit,
        "can_add": calculate_can_add(used, limit),
        "percentage": calculate_percentage(used, limit),
    }


def get_plan_amount(plan: Optional[str]) -> int:
    """Monthly price for a plan, 0 when the plan is unknown."""
    if not plan:
        return 0
    return PLAN_PRICES.get(plan.lower(), 0)


def get_plan_pricing() -> dict:
    return {
        plan: {"price": PLAN_PRICES[plan], "currency": "FCFA", "period": "mois"} for plan in PLANS
    }
