"""Tests for split tiers, equipment preference and the per-muscle hierarchy."""

import pytest

from coach.schemas.exercise import Exercise
from coach.training.tiers import (
    UNKNOWN_EQUIPMENT_PRIORITY,
    equipment_priority,
    matched_tier,
    muscle_tier,
    prioritize,
    sort_by_muscle_priority,
    tier,
)


def _ex(name, equipment=""):
    return Exercise(name=name, equipment=equipment)


class TestSplitTier:
    def test_exact_match(self):
        assert tier("Barbell Bench Press", "push") == "S"
        assert tier("Dumbbell Bench Press", "push") == "A"
        assert tier("Cable Fly", "push") == "B"

    def test_substring_match(self):
        assert tier("Paused Bench Press", "push") == "S"

    def test_unlisted_defaults_to_b(self):
        assert tier("Landmine Press", "pull") == "B"
        assert tier("Plank", "core") == "B"

    def test_short_names_do_not_borrow_a_tier(self):
        assert matched_tier("", "legs") is None
        assert matched_tier("   ", "push") is None
        assert tier("", "legs") == "B"
        assert tier("Press", "legs") == "B"

    def test_multi_word_fragment_of_listed_name(self):
        assert tier("Incline Bench", "push") == "S"

    def test_matched_tier_distinguishes_unlisted(self):
        assert matched_tier("Plank", "legs") is None
        assert matched_tier("Hack Squat", "legs") == "A"

    def test_prioritize_orders_by_tier_and_is_stable(self):
        exercises = [
            _ex("Cable Fly"),
            _ex("Tricep Kickback"),
            _ex("Overhead Press"),
            _ex("Dumbbell Bench Press"),
            _ex("Barbell Bench Press"),
        ]
        ordered = [ex.name for ex in prioritize(exercises, "push")]
        assert ordered == [
            "Overhead Press",
            "Barbell Bench Press",
            "Dumbbell Bench Press",
            "Cable Fly",
            "Tricep Kickback",
        ]


class TestEquipmentPriority:
    @pytest.mark.parametrize(
        "tag,expected",
        [("Barbell", 1), ("dumbbell", 2), ("Bodyweight", 3), ("Cable", 4), ("Machine", 5)],
    )
    def test_known_equipment(self, tag, expected):
        assert equipment_priority(tag) == expected

    def test_unknown_equipment_sorts_last(self):
        assert equipment_priority("Kettlebell") == UNKNOWN_EQUIPMENT_PRIORITY
        assert equipment_priority(None) == UNKNOWN_EQUIPMENT_PRIORITY


class TestMuscleHierarchy:
    def test_aliases(self):
        assert muscle_tier("Chest Dips", "chest") == "S"
        assert muscle_tier("Bayesian Curl", "biceps") == "S"
        assert muscle_tier("Pec Deck", "chest") == "B"

    def test_muscle_key_aliases(self):
        assert muscle_tier("Leg Press", "Quadriceps") == "A"

    def test_unlisted_defaults_to_b(self):
        assert muscle_tier("Cable Crossover", "chest") == "B"
        assert muscle_tier("Bench Press", "forearms") == "B"

    def test_sort_by_priority_then_equipment(self):
        exercises = [
            _ex("Pec Deck", "Machine"),
            _ex("Cable Crossover", "Cable"),
            _ex("Bench Press", "Barbell"),
            _ex("Incline Bench Press", "Barbell"),
            _ex("Svend Press", "Dumbbell"),
        ]
        ordered = [ex.name for ex in sort_by_muscle_priority(exercises, "chest")]
        assert ordered == ["Incline Bench Press", "Bench Press", "Pec Deck", "Svend Press", "Cable Crossover"]
