"""Business logic services."""

from .storage import CalorieStorage
from .tracker import CalorieTracker

__all__ = [
    "CalorieStorage",
    "CalorieTracker",
]
