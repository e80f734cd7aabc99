"""Read-only snapshots of tracker state for display."""

from pydantic import BaseModel, Field

from .item import Meal, Workout


class TrackerSummary(BaseModel):
    """Aggregate figures for the current day."""
    
    calorie_limit: int
    total_calories: int
    calories_consumed: int
    calories_burned: int
    calories_remaining: int
    
    # Clamped to [0, 1] for progress bars
    progress: float
    # total / limit without clamping
    progress_ratio: float
    
    over_limit: bool
    
    @property
    def progress_percent(self) -> float:
        return self.progress * 100


class TrackerItems(BaseModel):
    """All meals and workouts currently tracked, in insertion order."""
    
    meals: list[Meal] = Field(default_factory=list)
    workouts: list[Workout] = Field(default_factory=list)
