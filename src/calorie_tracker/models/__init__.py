"""Data models for the calorie tracker."""

from .item import (
    Item,
    ItemKind,
    Meal,
    Workout,
    filter_items,
    make_item,
    new_item_id,
    parse_item,
    parse_limit,
)
from .summary import TrackerItems, TrackerSummary

__all__ = [
    "Item",
    "ItemKind",
    "Meal",
    "Workout",
    "TrackerItems",
    "TrackerSummary",
    "filter_items",
    "make_item",
    "new_item_id",
    "parse_item",
    "parse_limit",
]
