"""Tests for workout plan and program generation."""

import pytest

from coach.errors import ExerciseNotFound, NoExercisesFound, ValidationFailed
from coach.schemas.exercise import Exercise
from coach.schemas.requests import GenerateWorkoutPlanRequest
from coach.training.catalog import find_exercise
from coach.training.generator import (
    FALLBACK_STRATEGIES,
    FilterStrategy,
    PoolQuery,
    build_pool,
    exercise_count,
    find_alternatives,
    generate_plan,
    generate_program,
    select_by_tier,
    selection_categories,
    set_scheme,
    tier_quotas,
)
from coach.training.taxonomy import classify, validate_workout
from coach.training.tiers import matched_tier


def _request(*groups, **kwargs):
    return GenerateWorkoutPlanRequest(muscleGroups=list(groups), **kwargs)


def _names(plan):
    return [ex.name for ex in plan.exercises]


class TestGeneratePlan:
    def test_push_day(self, catalog):
        plan = generate_plan(_request("push", goal="hypertrophy"), catalog)

        assert plan.category == "push"
        assert plan.title == "push Hypertrophy"
        assert plan.totalExercises == 6
        assert len(set(_names(plan))) == 6
        assert all(classify(find_exercise(n, catalog)) == "push" for n in _names(plan))

    def test_push_day_caps_pressing(self, catalog):
        plan = generate_plan(_request("push", goal="strength", duration=90), catalog)
        pressing = ("bench press", "incline", "decline", "close grip", "chest press", "dumbbell press")
        presses = [n for n in _names(plan) if any(t in n.lower() for t in pressing)]
        assert len(presses) <= 3

    def test_pull_day_balances_vertical_and_horizontal(self, catalog):
        plan = generate_plan(_request("pull", duration=60), catalog)
        names = [n.lower() for n in _names(plan)]
        vertical = [n for n in names if any(t in n for t in ("pull up", "chin-up", "lat pulldown"))]
        rows = [n for n in names if "row" in n]

        assert 1 <= len(vertical) <= 2
        assert len(rows) >= 2

    def test_leg_day_has_quad_and_hamstring_work(self, catalog):
        plan = generate_plan(_request("legs", duration=30), catalog)
        names = [n.lower() for n in _names(plan)]

        assert len(names) == 4
        assert any(t in n for n in names for t in ("squat", "leg press", "leg extension", "lunge"))
        assert any(t in n for n in names for t in ("deadlift", "leg curl", "good morning", "hip thrust"))

    def test_upper_day_mixes_push_and_pull(self, catalog):
        plan = generate_plan(_request("upper"), catalog)
        categories = [classify(find_exercise(n, catalog)) for n in _names(plan)]

        assert categories == ["push", "pull"] * 3

    def test_muscle_request_stays_on_those_muscles(self, catalog):
        plan = generate_plan(_request("chest", "triceps", duration=45), catalog)

        assert plan.category is None
        assert plan.totalExercises == 5
        for name in _names(plan):
            muscles = " ".join(find_exercise(name, catalog).all_muscles()).lower()
            assert "chest" in muscles or "triceps" in muscles

    def test_decline_movements_are_never_chosen(self, catalog):
        for groups in (["push"], ["chest"], ["upper"]):
            plan = generate_plan(_request(*groups, duration=90), catalog)
            assert not any("decline" in n.lower() for n in _names(plan))

    def test_set_scheme_follows_goal_and_experience(self, catalog):
        plan = generate_plan(_request("legs", goal="strength", experienceLevel="advanced"), catalog)
        assert {(ex.sets, ex.reps, ex.restTime) for ex in plan.exercises} == {(5, "3-5", 240)}

    def test_instructions_are_shortened(self, catalog):
        plan = generate_plan(_request("pull"), catalog)
        for ex in plan.exercises:
            assert ex.instructions.count(".") == 1

    def test_deterministic(self, catalog):
        request = _request("push", goal="general", duration=45)
        assert generate_plan(request, catalog) == generate_plan(request, catalog)

    def test_deload_variant(self, catalog):
        plan = generate_plan(_request("push", deload=True), catalog)
        assert plan.isDeload
        assert plan.title.endswith("(DELOAD WEEK)")
        assert {ex.sets for ex in plan.exercises} == {2}

    def test_generated_plans_validate_and_stay_valid(self, catalog):
        for split in ("push", "pull", "legs", "upper", "lower"):
            plan = generate_plan(_request(split), catalog)
            exercises = [find_exercise(n, catalog) for n in _names(plan)]
            assert validate_workout(exercises, split) == []
            assert validate_workout(exercises, split) == []

    def test_validation_failure_names_offenders(self, catalog):
        rows_only = FilterStrategy("rows", lambda exercises, query: [ex for ex in exercises if "Row" in ex.name])

        with pytest.raises(ValidationFailed) as exc:
            generate_plan(_request("push"), catalog, strategies=[rows_only])

        assert exc.value.category == "push"
        assert exc.value.offending
        assert all("Row" in name for name in exc.value.offending)
        assert exc.value.errors[0].startswith("Push workout contains non-push exercises")


class TestFallback:
    def test_unmatched_equipment_falls_back(self, catalog):
        query = PoolQuery(terms=("push",), muscles=("Chest",), category="push", equipment=("kettlebell",))
        pool, strategy = build_pool(catalog, query)

        assert strategy == "without_equipment"
        assert pool
        assert all(classify(ex) == "push" for ex in pool)

    def test_plan_with_unmatched_equipment_still_converges(self, catalog):
        plan = generate_plan(_request("push", equipment=["kettlebell"]), catalog)
        assert plan.totalExercises == 6

    def test_equipment_filter_when_it_matches(self, catalog):
        plan = generate_plan(_request("chest", equipment=["dumbbell"], duration=30), catalog)
        assert {ex.equipment for ex in plan.exercises} == {"Dumbbell"}

    def test_broadened_terms_match_names(self, catalog):
        query = PoolQuery(terms=("lunge",), muscles=("lunge",), category=None, equipment=())
        pool, strategy = build_pool(catalog, query)

        assert strategy == "broadened_terms"
        assert [ex.name for ex in pool] == ["Walking Lunge"]

    def test_exhausted_strategies_raise(self, catalog):
        with pytest.raises(NoExercisesFound) as exc:
            generate_plan(_request("zzz"), catalog)
        assert exc.value.muscle_groups == ["zzz"]
        assert "zzz" in exc.value.user_message

    def test_without_equipment_is_skipped_when_no_equipment_given(self):
        query = PoolQuery(terms=("x",), muscles=("x",), category=None, equipment=())
        assert [s.name for s in FALLBACK_STRATEGIES if s.applies(query)] == ["as_requested", "broadened_terms"]


class TestHelpers:
    @pytest.mark.parametrize("minutes,count", [(20, 4), (30, 4), (45, 5), (60, 6), (61, 7), (120, 7)])
    def test_exercise_count(self, minutes, count):
        assert exercise_count(minutes) == count

    def test_selection_categories(self):
        assert selection_categories(["upper"], "upper") == ("push", "pull")
        assert selection_categories(["arms"], None) == ("push", "pull")
        assert selection_categories(["back", "biceps"], None) == ("pull",)
        assert selection_categories(["core"], None) == ()

    def test_unknown_goal_or_level_falls_back(self):
        assert set_scheme("hypertrophy", "beginner") == (3, "8-10", 90)
        assert set_scheme("powerlifting", "elite") == (3, "8-12", 75)


PUSH_POOL = [
    Exercise(name=name)
    for name in (
        "Bench Press", "Overhead Press", "Military Press", "Incline Bench Press", "Dips", "Weighted Dips",
        "Dumbbell Bench Press", "Dumbbell Shoulder Press", "Incline Dumbbell Press",
        "Chest Press Machine", "Close Grip Bench Press",
        "Cable Fly", "Lateral Raise", "Tricep Pushdown", "Front Raise", "Skull Crusher",
    )
]

TIER_SPLITS = {
    "strength": {4: (3, 1, 0), 5: (4, 1, 0), 6: (4, 2, 0), 7: (5, 2, 0)},
    "hypertrophy": {4: (2, 1, 1), 5: (2, 2, 1), 6: (3, 2, 1), 7: (3, 3, 1)},
    "general": {4: (2, 1, 1), 5: (2, 2, 1), 6: (3, 2, 1), 7: (3, 3, 1)},
    "endurance": {4: (1, 1, 2), 5: (2, 1, 2), 6: (2, 2, 2), 7: (2, 2, 3)},
}


def _tier_counts(exercises, category):
    tiers = [matched_tier(ex.name, category) for ex in exercises]
    return tuple(tiers.count(t) for t in ("S", "A", "B"))


class TestTierSelection:
    @pytest.mark.parametrize(
        "goal,count,expected",
        [(goal, count, split) for goal, by_count in TIER_SPLITS.items() for count, split in by_count.items()],
    )
    def test_quotas_by_largest_remainder(self, goal, count, expected):
        quotas = tier_quotas(count, goal)
        assert sum(quotas.values()) == count
        assert tuple(quotas.get(t, 0) for t in ("S", "A", "B")) == expected

    @pytest.mark.parametrize(
        "goal,count,expected",
        [(goal, count, split) for goal, by_count in TIER_SPLITS.items() for count, split in by_count.items()],
    )
    def test_push_pool_split(self, goal, count, expected):
        chosen = select_by_tier(PUSH_POOL, "push", count, goal)

        assert len(chosen) == count
        assert _tier_counts(chosen, "push") == expected

    def test_short_leg_session_keeps_a_b_tier_slot(self, catalog):
        pool = [ex for ex in catalog if classify(ex) == "legs"]
        chosen = select_by_tier(pool, "legs", 4, "endurance")

        assert _tier_counts(chosen, "legs") == (1, 1, 2)

    def test_unknown_goal_uses_general_mix(self):
        assert tier_quotas(4, "powerlifting") == tier_quotas(4, "general")

    def test_thin_buckets_are_topped_up(self):
        pool = PUSH_POOL[:1] + PUSH_POOL[-1:]
        assert len(select_by_tier(pool, "push", 4, "strength")) == 2


class TestProgram:
    def test_three_day_split(self, catalog):
        program = generate_program(3, catalog, "beginner", "hypertrophy")

        assert program.title == "3-Day Hypertrophy Program"
        assert [d.dayName for d in program.workouts] == ["Day 1: Push", "Day 2: Pull", "Day 3: Legs"]
        assert all(d.plan.estimatedDuration == 60 for d in program.workouts)
        assert all(d.plan.totalExercises == 6 for d in program.workouts)

    def test_five_day_split(self, catalog):
        program = generate_program(5, catalog)
        assert [d.name for d in program.workouts] == ["Chest", "Back", "Legs", "Shoulders", "Arms"]
        assert program.workouts[4].muscleGroups == ["biceps", "triceps"]

    def test_other_day_counts_cycle_upper_lower(self, catalog):
        program = generate_program(7, catalog)
        assert len(program.workouts) == 7
        assert [d.name for d in program.workouts][:5] == ["Upper", "Lower", "Upper", "Lower", "Upper"]


class TestAlternatives:
    def test_same_primary_muscles(self, catalog):
        original, alternatives = find_alternatives("barbell bench press", catalog)

        assert original.name == "Barbell Bench Press"
        assert len(alternatives) == 5
        assert "Barbell Bench Press" not in [a.name for a in alternatives]
        assert not any("Decline" in a.name for a in alternatives)

    def test_equipment_filter(self, catalog):
        _, alternatives = find_alternatives("Barbell Bench Press", catalog, equipment="Dumbbell")
        assert alternatives
        assert {a.equipment for a in alternatives} == {"Dumbbell"}

    def test_unknown_exercise(self, catalog):
        with pytest.raises(ExerciseNotFound):
            find_alternatives("Underwater Bench", catalog)
