"""
Account Level Service
Loyalty tiers derived from a customer's lifetime spend

Tiers (spend threshold):
- bronze   0      Bronze Explorer
- silver   500    Silver Innovator
- gold     1000   Gold Pioneer
- platinum 2500   Platinum Genius

Author: TechTots
Date: 2025-10-20
"""
import math
from decimal import Decimal, ROUND_FLOOR
from typing import List, Optional, Tuple

from storefront.domain.account import AccountLevel

LEVELS: List[Tuple[str, str, Decimal, List[str]]] = [
    ("bronze", "Bronze Explorer", Decimal("0"), [
        "Welcome newsletter with STEM activity ideas",
        "Birthday surprise coupon",
    ]),
    ("silver", "Silver Innovator", Decimal("500"), [
        "5% off every order",
        "Early access to new kits",
    ]),
    ("gold", "Gold Pioneer", Decimal("1000"), [
        "Free standard shipping",
        "Priority customer support",
    ]),
    ("platinum", "Platinum Genius", Decimal("2500"), [
        "10% off every order",
        "Exclusive workshops and beta kits",
    ]),
]

POINTS_PER_DOLLAR = 1


class AccountLevelService:
    """Pure calculator, no database access"""

    def __init__(self, levels: Optional[List[Tuple[str, str, Decimal, List[str]]]] = None,
                 points_per_dollar: int = POINTS_PER_DOLLAR):
        self.levels = levels or LEVELS
        self.points_per_dollar = points_per_dollar

    def _current_index(self, total_spent: Decimal) -> int:
        index = 0
        for position, (_, _, threshold, _) in enumerate(self.levels):
            if total_spent >= threshold:
                index = position
        return index

    def overall_progress(self, total_spent: Decimal) -> float:
        """Percent of the way to the top tier; never decreases as spend grows"""
        top = self.levels[-1][2]
        if top <= 0:
            return 100.0
        return round(min(100.0, float(max(Decimal("0"), total_spent) / top * 100)), 2)

    def calculate(self, total_spent) -> AccountLevel:
        spent = max(Decimal("0"), Decimal(str(total_spent)))
        index = self._current_index(spent)
        key, name, threshold, _ = self.levels[index]

        benefits = [benefit for level in self.levels[:index + 1] for benefit in level[3]]

        if index == len(self.levels) - 1:
            return AccountLevel(
                current=key,
                name=name,
                progress=100,
                overall_progress=self.overall_progress(spent),
                next_level=None,
                next_level_name=None,
                amount_to_next_level=None,
                benefits_unlocked=benefits,
            )

        next_key, next_name, next_threshold, _ = self.levels[index + 1]
        span = next_threshold - threshold
        progress = int(math.floor((spent - threshold) / span * 100)) if span > 0 else 100

        return AccountLevel(
            current=key,
            name=name,
            progress=max(0, min(99, progress)),
            overall_progress=self.overall_progress(spent),
            next_level=next_key,
            next_level_name=next_name,
            amount_to_next_level=(next_threshold - spent).quantize(Decimal("0.01")),
            benefits_unlocked=benefits,
        )

    def loyalty_points(self, total_spent) -> int:
        spent = max(Decimal("0"), Decimal(str(total_spent)))
        return int((spent * self.points_per_dollar).to_integral_value(rounding=ROUND_FLOOR))
