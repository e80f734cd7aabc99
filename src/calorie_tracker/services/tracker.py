"""Calorie tracker: the authoritative owner of the day's totals."""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from ..exceptions import StorageError, ValidationError
from ..models.item import Item, ItemKind, Meal, Workout
from ..models.summary import TrackerItems, TrackerSummary
from ..utils.config import Settings
from .storage import CalorieStorage

logger = logging.getLogger(__name__)


class CalorieTracker:
    """
    Tracks meals, workouts and the running calorie total against a daily limit.
    
    State is loaded from storage once, at construction. Every mutation
    updates memory first and then writes through to storage before
    returning. If the write fails the StorageError propagates and memory
    stays ahead of storage; callers should report that changes may not
    be saved rather than retry the whole operation.
    
    The running total is adjusted per operation and always equals
    consumed minus burned.
    """
    
    def __init__(
        self,
        storage: CalorieStorage,
        settings: Optional[Settings] = None,
    ):
        self.storage = storage
        self.settings = settings or storage.settings
        
        self._calorie_limit = storage.get_calorie_limit()
        self._total_calories = storage.get_total_calories()
        self._meals: list[Meal] = storage.get_meals()
        self._workouts: list[Workout] = storage.get_workouts()
        
        if not self.check_consistency():
            logger.warning(
                "Stored total %d does not match stored items (%d); using the items",
                self._total_calories,
                self._item_balance(),
            )
            self._total_calories = self._item_balance()
            with self._write_through("load"):
                self.storage.update_total_calories(self._total_calories)
    
    # ----- mutations -----
    
    def add_meal(self, meal: Meal) -> None:
        """Log a meal and add its calories to the total."""
        self._check_new_item(meal, ItemKind.MEAL)
        self._meals.append(meal)
        self._total_calories += meal.calories
        logger.debug("Added meal %s (%d kcal)", meal.id, meal.calories)
        
        with self._write_through("add_meal"):
            self.storage.update_total_calories(self._total_calories)
            self.storage.save_meal(meal)
    
    def add_workout(self, workout: Workout) -> None:
        """Log a workout and subtract its calories from the total."""
        self._check_new_item(workout, ItemKind.WORKOUT)
        self._workouts.append(workout)
        self._total_calories -= workout.calories
        logger.debug("Added workout %s (%d kcal)", workout.id, workout.calories)
        
        with self._write_through("add_workout"):
            self.storage.update_total_calories(self._total_calories)
            self.storage.save_workout(workout)
    
    def remove_meal(self, item_id: str) -> None:
        """Remove a meal by id. Unknown ids are ignored."""
        index = self._find(self._meals, item_id)
        if index is None:
            return
        
        meal = self._meals.pop(index)
        self._total_calories -= meal.calories
        logger.debug("Removed meal %s (%d kcal)", meal.id, meal.calories)
        
        with self._write_through("remove_meal"):
            self.storage.update_total_calories(self._total_calories)
            self.storage.remove_meal(item_id)
    
    def remove_workout(self, item_id: str) -> None:
        """Remove a workout by id. Unknown ids are ignored."""
        index = self._find(self._workouts, item_id)
        if index is None:
            return
        
        workout = self._workouts.pop(index)
        self._total_calories += workout.calories
        logger.debug("Removed workout %s (%d kcal)", workout.id, workout.calories)
        
        with self._write_through("remove_workout"):
            self.storage.update_total_calories(self._total_calories)
            self.storage.remove_workout(item_id)
    
    def set_limit(self, value: int) -> None:
        """Set the daily calorie limit. Any integer is accepted."""
        self._calorie_limit = value
        logger.debug("Calorie limit set to %d", value)
        
        with self._write_through("set_limit"):
            self.storage.set_calorie_limit(value)
    
    def reset(self) -> None:
        """
        Clear the day: total to 0, no meals, no workouts.
        
        The limit is kept unless ``reset_restores_default_limit`` is set,
        in which case it goes back to the default. Either way the stored
        limit matches the in-memory one afterwards.
        """
        self._total_calories = 0
        self._meals = []
        self._workouts = []
        if self.settings.reset_restores_default_limit:
            self._calorie_limit = self.storage.default_calorie_limit
        logger.debug("Tracker reset (limit %d)", self._calorie_limit)
        
        with self._write_through("reset"):
            self.storage.reset_storage()
            if self._calorie_limit != self.storage.default_calorie_limit:
                self.storage.set_calorie_limit(self._calorie_limit)
    
    # ----- queries -----
    
    @property
    def calorie_limit(self) -> int:
        return self._calorie_limit
    
    @property
    def total_calories(self) -> int:
        return self._total_calories
    
    @property
    def calories_consumed(self) -> int:
        """Sum of meal calories."""
        return sum(meal.calories for meal in self._meals)
    
    @property
    def calories_burned(self) -> int:
        """Sum of workout calories."""
        return sum(workout.calories for workout in self._workouts)
    
    @property
    def calories_remaining(self) -> int:
        return self._calorie_limit - self._total_calories
    
    @property
    def over_limit(self) -> bool:
        return self.calories_remaining <= 0
    
    @property
    def progress_ratio(self) -> float:
        """Total as a fraction of the limit, unclamped."""
        if self._calorie_limit == 0:
            return float("inf") if self._total_calories > 0 else 0.0
        return self._total_calories / self._calorie_limit
    
    @property
    def progress(self) -> float:
        """Progress towards the limit, clamped to [0, 1] for display."""
        return min(max(self.progress_ratio, 0.0), 1.0)
    
    @property
    def meals(self) -> tuple[Meal, ...]:
        return tuple(self._meals)
    
    @property
    def workouts(self) -> tuple[Workout, ...]:
        return tuple(self._workouts)
    
    def items(self) -> TrackerItems:
        """All known meals and workouts, for populating a display."""
        return TrackerItems(meals=list(self._meals), workouts=list(self._workouts))
    
    def summary(self) -> TrackerSummary:
        """Snapshot of the aggregate figures."""
        return TrackerSummary(
            calorie_limit=self.calorie_limit,
            total_calories=self.total_calories,
            calories_consumed=self.calories_consumed,
            calories_burned=self.calories_burned,
            calories_remaining=self.calories_remaining,
            progress=self.progress,
            progress_ratio=self.progress_ratio,
            over_limit=self.over_limit,
        )
    
    def check_consistency(self) -> bool:
        """True when the running total equals consumed minus burned."""
        return self._total_calories == self._item_balance()
    
    # ----- internals -----
    
    def _item_balance(self) -> int:
        return self.calories_consumed - self.calories_burned
    
    @staticmethod
    def _find(items: list, item_id: str) -> Optional[int]:
        for index, item in enumerate(items):
            if item.id == item_id:
                return index
        return None
    
    def _check_new_item(self, item: Item, kind: ItemKind) -> None:
        if getattr(type(item), "kind", None) is not kind:
            raise ValidationError(f"Expected a {kind.value}, got {type(item).__name__}")
        if self._find(self._meals, item.id) is not None or self._find(self._workouts, item.id) is not None:
            raise ValidationError(f"Item id {item.id!r} is already tracked")
    
    @contextmanager
    def _write_through(self, operation: str) -> Iterator[None]:
        try:
            yield
        except StorageError as e:
            logger.error("%s applied in memory but not saved: %s", operation, e)
            raise
