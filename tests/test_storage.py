"""Tests for the durable store."""

import pytest

from calorie_tracker.exceptions import StorageError
from calorie_tracker.models import Meal, Workout
from calorie_tracker.services import CalorieStorage


class TestDefaults:
    """An empty store falls back to defaults."""
    
    def test_empty_store(self, storage):
        """Test defaults on an empty store."""
        assert storage.get_calorie_limit() == 2000
        assert storage.get_total_calories() == 0
        assert storage.get_meals() == []
        assert storage.get_workouts() == []
    
    def test_default_limit_from_settings(self, settings):
        """Test that the default limit comes from settings."""
        settings.default_calorie_limit = 1800
        with CalorieStorage(settings) as storage:
            assert storage.get_calorie_limit() == 1800
    
    def test_creates_data_dir(self, tmp_path, settings):
        """Test that missing data directories are created."""
        settings.data_dir = tmp_path / "nested" / "dir"
        with CalorieStorage(settings) as storage:
            storage.set_calorie_limit(1500)
        assert (tmp_path / "nested" / "dir" / "tracker.json").exists()


class TestScalars:
    """Tests for the limit and running total."""
    
    def test_limit(self, storage):
        """Test overwriting the limit keeps a single record."""
        storage.set_calorie_limit(1500)
        storage.set_calorie_limit(1600)
        assert storage.get_calorie_limit() == 1600
        assert len(storage.db.table("settings")) == 1
    
    def test_total(self, storage):
        """Test storing a negative running total."""
        storage.update_total_calories(-200)
        assert storage.get_total_calories() == -200
    
    def test_persists_across_instances(self, settings):
        """Test that scalars survive reopening the store."""
        with CalorieStorage(settings) as storage:
            storage.set_calorie_limit(1700)
            storage.update_total_calories(450)
        
        with CalorieStorage(settings) as storage:
            assert storage.get_calorie_limit() == 1700
            assert storage.get_total_calories() == 450
    
    def test_invalid_stored_value(self, storage):
        """Test that a non-integer limit falls back to the default."""
        storage.db.table("settings").insert({"key": "calorie_limit", "value": "lots"})
        assert storage.get_calorie_limit() == 2000


class TestCollections:
    """Tests for meals and workouts."""
    
    def test_insertion_order(self, storage):
        """Test that meals come back in insertion order."""
        meals = [Meal(name=name, calories=100) for name in ("Eggs", "Toast", "Soup")]
        for meal in meals:
            storage.save_meal(meal)
        assert storage.get_meals() == meals
    
    def test_remove(self, storage):
        """Test removing a meal by id."""
        eggs = Meal(name="Eggs", calories=300)
        toast = Meal(name="Toast", calories=100)
        storage.save_meal(eggs)
        storage.save_meal(toast)
        
        storage.remove_meal(eggs.id)
        
        assert storage.get_meals() == [toast]
    
    def test_remove_absent_is_noop(self, storage):
        """Test that removing an unknown id changes nothing."""
        run = Workout(name="Run", calories=200)
        storage.save_workout(run)
        
        storage.remove_workout("missing")
        storage.remove_workout("missing")
        
        assert storage.get_workouts() == [run]
    
    def test_meals_and_workouts_separate(self, storage):
        """Test that removal only touches its own table."""
        storage.save_meal(Meal(id="same", name="Eggs", calories=300))
        storage.save_workout(Workout(id="other", name="Run", calories=200))
        
        storage.remove_meal("other")
        
        assert len(storage.get_meals()) == 1
        assert len(storage.get_workouts()) == 1
    
    def test_invalid_record_skipped(self, storage):
        """Test that invalid records are skipped."""
        storage.db.table("meals").insert({"id": "bad", "name": "Mystery"})
        good = Meal(name="Eggs", calories=300)
        storage.save_meal(good)
        
        assert storage.get_meals() == [good]
    
    def test_record_without_id_skipped(self, storage):
        """Test that records without an id are skipped, since they could never be removed."""
        storage.db.table("meals").insert({"name": "Eggs", "calories": 300})
        toast = Meal(name="Toast", calories=100)
        storage.save_meal(toast)
        
        assert storage.get_meals() == [toast]
        assert storage.get_meals() == [toast]


class TestReset:
    """Tests for clearing the store."""
    
    def test_reset_storage(self, storage):
        """Test clearing the store back to defaults."""
        storage.set_calorie_limit(1500)
        storage.update_total_calories(100)
        storage.save_meal(Meal(name="Eggs", calories=300))
        storage.save_workout(Workout(name="Run", calories=200))
        
        storage.reset_storage()
        
        assert storage.get_calorie_limit() == 2000
        assert storage.get_total_calories() == 0
        assert storage.get_meals() == []
        assert storage.get_workouts() == []


class TestClose:
    """Closing releases the database file."""
    
    def test_close_releases_file(self, settings):
        """Test that close shuts the file handle even with no default-table documents."""
        storage = CalorieStorage(settings)
        storage.save_meal(Meal(name="Eggs", calories=300))
        handle = storage.db.storage._handle
        
        storage.close()
        
        assert handle.closed
        assert storage._db is None
    
    def test_close_corrupt_file(self, settings):
        """Test that leaving the context on a corrupt file does not raise."""
        settings.db_path.write_text("{not json")
        
        with CalorieStorage(settings) as storage:
            assert storage.get_meals() == []
        
        assert storage._db is None


class TestFailures:
    """Unreadable data is treated as empty; failed writes are loud."""
    
    def test_corrupt_file_reads_as_empty(self, settings):
        """Test that a corrupt file reads as empty."""
        settings.db_path.write_text("{not json")
        
        with CalorieStorage(settings) as storage:
            assert storage.get_meals() == []
            assert storage.get_workouts() == []
            assert storage.get_calorie_limit() == 2000
            assert storage.get_total_calories() == 0
    
    def test_corrupt_file_write_raises(self, settings):
        """Test that writing to a corrupt file raises."""
        settings.db_path.write_text("{not json")
        
        with CalorieStorage(settings) as storage:
            with pytest.raises(StorageError):
                storage.save_meal(Meal(name="Eggs", calories=300))
    
    def test_reset_recovers_corrupt_file(self, settings):
        """Test that reset overwrites a corrupt file."""
        settings.db_path.write_text("{not json")
        
        with CalorieStorage(settings) as storage:
            storage.reset_storage()
            storage.save_meal(Meal(name="Eggs", calories=300))
            assert len(storage.get_meals()) == 1
    
    @pytest.mark.parametrize("write", [
        lambda s: s.set_calorie_limit(1500),
        lambda s: s.update_total_calories(10),
        lambda s: s.save_meal(Meal(name="Eggs", calories=300)),
        lambda s: s.save_workout(Workout(name="Run", calories=200)),
        lambda s: s.remove_meal("x"),
        lambda s: s.remove_workout("x"),
        lambda s: s.reset_storage(),
    ])
    def test_write_failure_raises(self, storage, fail_writes, write):
        """Test that every write surfaces OS errors as StorageError."""
        fail_writes(storage)
        
        with pytest.raises(StorageError) as exc_info:
            write(storage)
        
        assert isinstance(exc_info.value.__cause__, OSError)
