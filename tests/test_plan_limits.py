from juris.plan_limits import (
    PLAN_FEATURES,
    UNLIMITED,
    build_usage_entry,
    calculate_can_add,
    calculate_percentage,
    get_plan_amount,
    get_plan_limits,
    get_plan_pricing,
    normalize_plan,
)


class TestPlanLookup:
    def test_unknown_or_missing_plan_falls_back_to_basic(self):
        assert normalize_plan(None) == "basic"
        assert normalize_plan("gold") == "basic"
        assert normalize_plan("PREMIUM") == "premium"

    def test_basic_limits(self):
        assert get_plan_limits("basic") == {"max_cases": 10, "max_clients": 25, "max_documents": 50}

    def test_enterprise_is_unlimited(self):
        limits = get_plan_limits("enterprise")
        assert all(value == UNLIMITED for value in limits.values())

    def test_enterprise_includes_every_premium_feature(self):
        assert set(PLAN_FEATURES["premium"]) <= set(PLAN_FEATURES["enterprise"])

    def test_data_export_needs_a_paid_tier_above_basic(self):
        assert "data_export" not in PLAN_FEATURES["basic"]
        assert "data_export" in PLAN_FEATURES["premium"]
        assert "time_tracking" in PLAN_FEATURES["premium"]


class TestUsage:
    def test_can_add_below_limit_only(self):
        assert calculate_can_add(9, 10) is True
        assert calculate_can_add(10, 10) is False
        assert calculate_can_add(10_000, UNLIMITED) is True

    def test_percentage_is_capped(self):
        assert calculate_percentage(5, 10) == 50
        assert calculate_percentage(30, 10) == 100
        assert calculate_percentage(30, UNLIMITED) == 0
        assert calculate_percentage(0, 0) == 100

    def test_usage_entry(self):
        assert build_usage_entry(25, 25) == {
            "used": 25,
            "limit": 25,
            "can_add": False,
            "percentage": 100,
        }


class TestPricing:
    def test_default_prices(self):
        assert get_plan_amount("basic") == 15000
        assert get_plan_amount("premium") == 35000
        assert get_plan_amount("enterprise") == 75000
        assert get_plan_amount("unknown") == 0
        assert get_plan_amount(None) == 0

    def test_pricing_table(self):
        pricing = get_plan_pricing()
        assert set(pricing) == {"basic", "premium", "enterprise"}
        assert pricing["premium"] == {"price": 35000, "currency": "FCFA", "period": "mois"}
