"""Closed set of expense categories accepted by the tracker."""

from __future__ import annotations

from enum import Enum

__all__ = ["ExpenseCategory", "category_label"]


class ExpenseCategory(str, Enum):
    """Expense categories validated at the API boundary.

    Members compare equal to their string value so ORM rows storing the plain
    label and enum members group under the same key.
    """

    TRAVEL = "Travel"
    OFFICE = "Office"
    MARKETING = "Marketing"
    EQUIPMENT = "Equipment"
    SOFTWARE = "Software"
    TRAINING = "Training"
    FOOD = "Food"
    TRANSPORT = "Transport"
    ACCOMMODATION = "Accommodation"
    OTHER = "Other"

    @classmethod
    def labels(cls) -> list[str]:
        return [member.value for member in cls]


def category_label(category: ExpenseCategory | str) -> str:
    """Return the plain string label used as breakdown key."""

    if isinstance(category, ExpenseCategory):
        return category.value
    return str(category)
