"""Durable storage for tracker state using TinyDB."""

import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError
from tinydb import Query, TinyDB

from ..exceptions import StorageError
from ..models.item import Item, Meal, Workout
from ..utils.config import Settings, get_settings

logger = logging.getLogger(__name__)

CALORIE_LIMIT_KEY = "calorie_limit"
TOTAL_CALORIES_KEY = "total_calories"

SETTINGS_TABLE = "settings"
MEALS_TABLE = "meals"
WORKOUTS_TABLE = "workouts"


class CalorieStorage:
    """
    Local storage for the calorie limit, running total, meals and workouts.
    
    Data is stored as JSON in the data directory. Scalars live in the
    ``settings`` table under fixed keys; items live in the ``meals`` and
    ``workouts`` tables in insertion order. TinyDB flushes and fsyncs on
    every write, so nothing is batched.
    
    Unreadable data is logged and treated as absent. Failed writes raise
    StorageError.
    """
    
    def __init__(
        self,
        settings: Optional[Settings] = None,
        db_path: Optional[Path] = None,
    ):
        self.settings = settings or get_settings()
        self._db_path = db_path
        self._db: Optional[TinyDB] = None
    
    @property
    def db_path(self) -> Path:
        """Path to the database file."""
        path = self.location
        path.parent.mkdir(parents=True, exist_ok=True)
        return path
    
    @property
    def location(self) -> Path:
        """Database file path, without touching the filesystem."""
        return self._db_path or self.settings.db_path
    
    @property
    def db(self) -> TinyDB:
        """Get the TinyDB instance."""
        if self._db is None:
            self._db = TinyDB(self.db_path)
        return self._db
    
    @property
    def default_calorie_limit(self) -> int:
        return self.settings.default_calorie_limit
    
    # ----- scalars -----
    
    def get_calorie_limit(self) -> int:
        """Return the stored limit, or the default if none is stored."""
        return self._get_value(CALORIE_LIMIT_KEY, self.default_calorie_limit)
    
    def set_calorie_limit(self, value: int) -> None:
        """Overwrite the stored limit."""
        self._set_value(CALORIE_LIMIT_KEY, value)
    
    def get_total_calories(self) -> int:
        """Return the stored running total, or 0."""
        return self._get_value(TOTAL_CALORIES_KEY, 0)
    
    def update_total_calories(self, value: int) -> None:
        """Overwrite the stored running total."""
        self._set_value(TOTAL_CALORIES_KEY, value)
    
    # ----- collections -----
    
    def get_meals(self) -> list[Meal]:
        """Return stored meals in insertion order."""
        return self._get_items(MEALS_TABLE, Meal)
    
    def save_meal(self, meal: Meal) -> None:
        """Append a meal."""
        self._save_item(MEALS_TABLE, meal)
    
    def remove_meal(self, item_id: str) -> None:
        """Remove a meal by id. No-op if it isn't stored."""
        self._remove_item(MEALS_TABLE, item_id)
    
    def get_workouts(self) -> list[Workout]:
        """Return stored workouts in insertion order."""
        return self._get_items(WORKOUTS_TABLE, Workout)
    
    def save_workout(self, workout: Workout) -> None:
        """Append a workout."""
        self._save_item(WORKOUTS_TABLE, workout)
    
    def remove_workout(self, item_id: str) -> None:
        """Remove a workout by id. No-op if it isn't stored."""
        self._remove_item(WORKOUTS_TABLE, item_id)
    
    def reset_storage(self) -> None:
        """Clear total, meals and workouts and put the limit back to the default."""
        try:
            self.db.drop_tables()
            self.db.table(SETTINGS_TABLE).insert(
                {"key": CALORIE_LIMIT_KEY, "value": self.default_calorie_limit}
            )
        except (OSError, ValueError) as e:
            raise self._write_error("reset_storage", e) from e
        logger.info("Storage reset at %s", self.location)
    
    # ----- internals -----
    
    def _get_value(self, key: str, default: int) -> int:
        Setting = Query()
        try:
            doc = self.db.table(SETTINGS_TABLE).get(Setting.key == key)
        except ValueError as e:
            logger.warning("Could not read %s from %s: %s", key, self.location, e)
            return default
        except OSError as e:
            raise StorageError(f"Could not read {key}: {e}", operation="read") from e
        
        if doc is None:
            return default
        value = doc.get("value")
        # bool is an int subclass but never a valid calorie figure
        if not isinstance(value, int) or isinstance(value, bool):
            logger.warning("Ignoring invalid stored %s: %r", key, value)
            return default
        return value
    
    def _set_value(self, key: str, value: int) -> None:
        Setting = Query()
        try:
            self.db.table(SETTINGS_TABLE).upsert(
                {"key": key, "value": value}, Setting.key == key
            )
        except (OSError, ValueError) as e:
            raise self._write_error(f"set {key}", e) from e
    
    def _get_items(self, table_name: str, item_type: type[Item]) -> list[Any]:
        try:
            rows = self.db.table(table_name).all()
        except ValueError as e:
            logger.warning("Could not read %s from %s: %s", table_name, self.location, e)
            return []
        except OSError as e:
            raise StorageError(f"Could not read {table_name}: {e}", operation="read") from e
        
        items = []
        for row in rows:
            # Without a stored id the item could never be removed from storage
            if "id" not in row:
                logger.warning("Skipping %s record without an id: %r", table_name, dict(row))
                continue
            try:
                items.append(item_type.model_validate(dict(row)))
            except PydanticValidationError as e:
                logger.warning("Skipping invalid stored %s record %r: %s", table_name, dict(row), e)
        return items
    
    def _save_item(self, table_name: str, item: Item) -> None:
        try:
            self.db.table(table_name).insert(item.model_dump(mode="json"))
        except (OSError, ValueError) as e:
            raise self._write_error(f"save to {table_name}", e) from e
    
    def _remove_item(self, table_name: str, item_id: str) -> None:
        ItemQuery = Query()
        try:
            self.db.table(table_name).remove(ItemQuery.id == item_id)
        except (OSError, ValueError) as e:
            raise self._write_error(f"remove from {table_name}", e) from e
    
    def _write_error(self, operation: str, error: Exception) -> StorageError:
        return StorageError(
            f"Could not {operation} in {self.location}: {error}",
            operation=operation,
        )
    
    def close(self) -> None:
        """Close the database connection."""
        if self._db is not None:
            self._db.close()
            self._db = None
    
    def __enter__(self) -> "CalorieStorage":
        return self
    
    def __exit__(self, *args) -> None:
        self.close()
