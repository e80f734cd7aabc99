"""Logged meal and workout items."""

import math
from enum import Enum
from typing import ClassVar, Iterable, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ValidationError


class ItemKind(str, Enum):
    """Which collection an item belongs to."""
    MEAL = "meal"
    WORKOUT = "workout"
    
    @property
    def sign(self) -> int:
        """Sign applied to the item's calories in the running total."""
        return 1 if self is ItemKind.MEAL else -1


def new_item_id() -> str:
    """Generate a fresh item id."""
    return uuid4().hex[:16]


class Item(BaseModel):
    """A single logged meal or workout."""
    
    model_config = ConfigDict(frozen=True)
    
    kind: ClassVar[ItemKind]
    
    id: str = Field(default_factory=new_item_id)
    name: str
    calories: int


class Meal(Item):
    """Food eaten; adds to the total."""
    
    kind: ClassVar[ItemKind] = ItemKind.MEAL


class Workout(Item):
    """Exercise done; subtracts from the total."""
    
    kind: ClassVar[ItemKind] = ItemKind.WORKOUT


ITEM_TYPES: dict[ItemKind, type[Item]] = {
    ItemKind.MEAL: Meal,
    ItemKind.WORKOUT: Workout,
}


def make_item(kind: Union[ItemKind, str], name: str, calories: int) -> Item:
    """Build a meal or workout with a freshly generated id."""
    item_type = ITEM_TYPES[ItemKind(kind)]
    return item_type(id=new_item_id(), name=name, calories=calories)


def _to_int(value: object, label: str) -> int:
    """Convert form input to an integer, rejecting anything non-numeric."""
    if isinstance(value, bool):
        raise ValidationError(f"{label} must be a number")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            raise ValidationError(f"{label} must be a whole number")
        return int(value)
    if not isinstance(value, str):
        raise ValidationError(f"{label} must be a number")
    
    text = value.strip()
    if not text:
        raise ValidationError("Please fill in all fields")
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        raise ValidationError(f"{label} must be a number, got {value!r}") from None
    return _to_int(number, label)


def parse_item(kind: Union[ItemKind, str], name: object, calories: object) -> Item:
    """
    Validate raw input and build a typed item.
    
    This is the boundary between untrusted input and the tracker: names
    are stripped and must be non-empty, calories must convert to a
    non-negative integer.
    """
    try:
        kind = ItemKind(kind)
    except ValueError:
        raise ValidationError(f"Unknown item kind: {kind!r}") from None
    
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Please fill in all fields")
    
    amount = _to_int(calories, "Calories")
    if amount < 0:
        raise ValidationError("Calories cannot be negative")
    
    try:
        return make_item(kind, name.strip(), amount)
    except PydanticValidationError as e:
        raise ValidationError(str(e)) from e


def parse_limit(value: object) -> int:
    """Validate a daily calorie limit entered by the user."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError("Please add a limit")
    limit = _to_int(value, "Limit")
    if limit < 0:
        raise ValidationError("Limit cannot be negative")
    return limit


def filter_items(items: Iterable[Item], text: str) -> list[Item]:
    """Return items whose name contains text, ignoring case."""
    needle = text.strip().lower()
    return [item for item in items if needle in item.name.lower()]
