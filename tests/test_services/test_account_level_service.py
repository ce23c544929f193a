"""
Unit tests for AccountLevelService

Pure calculations, no database required.

Author: TechTots
Date: 2025-10-20
"""
from decimal import Decimal

import pytest

from storefront.services.account_level_service import AccountLevelService, LEVELS


class TestAccountLevels:
    """Tier selection and progress"""

    def setup_method(self):
        self.service = AccountLevelService()

    def test_new_customer_is_bronze(self):
        """Zero spend starts at the bottom tier with the full gap to silver"""
        level = self.service.calculate(Decimal("0"))

        assert level.current == "bronze"
        assert level.name == "Bronze Explorer"
        assert level.progress == 0
        assert level.next_level == "silver"
        assert level.amount_to_next_level == Decimal("500.00")

    def test_progress_within_tier(self):
        """750 is halfway from silver (500) to gold (1000)"""
        level = self.service.calculate(Decimal("750"))

        assert level.current == "silver"
        assert level.progress == 50
        assert level.next_level_name == "Gold Pioneer"
        assert level.amount_to_next_level == Decimal("250.00")

    @pytest.mark.parametrize("spent,expected", [
        ("499.99", "bronze"),
        ("500", "silver"),
        ("1000", "gold"),
        ("2499.99", "gold"),
        ("2500", "platinum"),
    ])
    def test_threshold_boundaries(self, spent, expected):
        assert self.service.calculate(Decimal(spent)).current == expected

    def test_top_tier_has_no_next_level(self):
        level = self.service.calculate(Decimal("4000"))

        assert level.current == "platinum"
        assert level.progress == 100
        assert level.overall_progress == 100.0
        assert level.next_level is None
        assert level.amount_to_next_level is None

    def test_benefits_accumulate(self):
        """Gold unlocks its own benefits plus every lower tier's"""
        level = self.service.calculate(Decimal("1200"))

        expected = [benefit for tier in LEVELS[:3] for benefit in tier[3]]
        assert level.benefits_unlocked == expected

    def test_negative_spend_treated_as_zero(self):
        level = self.service.calculate(Decimal("-20"))

        assert level.current == "bronze"
        assert level.progress == 0

    def test_progress_below_next_tier_never_reports_complete(self):
        """Just short of gold still shows under 100%"""
        level = self.service.calculate(Decimal("999.99"))

        assert level.current == "silver"
        assert level.progress == 99


class TestOverallProgress:

    def test_overall_progress_is_monotonic(self):
        """Spending more never lowers overall progress, even across tier changes"""
        service = AccountLevelService()
        spends = [Decimal(value) for value in range(0, 3001, 50)]

        progress = [service.overall_progress(spent) for spent in spends]

        assert progress == sorted(progress)
        assert progress[0] == 0.0
        assert progress[-1] == 100.0

    def test_overall_progress_value(self):
        assert AccountLevelService().overall_progress(Decimal("1250")) == 50.0


class TestLoyaltyPoints:

    def test_points_floor_spend(self):
        assert AccountLevelService().loyalty_points(Decimal("123.99")) == 123

    def test_points_multiplier(self):
        assert AccountLevelService(points_per_dollar=2).loyalty_points("10.50") == 21
