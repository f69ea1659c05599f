"""Tests for weekly volume, frequency and imbalance detection."""

import pytest

from coach.training.volume import (
    VOLUME_LANDMARKS,
    detect_imbalances,
    frequency_status,
    severity,
    volume_recommendation,
    volume_report,
    volume_status,
    weekly_volume,
)


class TestVolumeStatus:
    def test_bands_for_chest(self):
        assert volume_status(3, "chest").status == "suboptimal"
        assert volume_status(6, "chest").status == "below_optimal"
        assert volume_status(12, "chest").status == "optimal"
        assert volume_status(20, "chest").status == "high"
        assert volume_status(30, "chest").status == "very_high"
        assert volume_status(45, "chest").status == "excessive"

    def test_adjustment_points_at_the_optimal_band(self):
        assert volume_status(3, "chest").adjustment == 1
        assert volume_status(6, "chest").adjustment == 2
        assert volume_status(45, "chest").adjustment == -27

    def test_unknown_muscle(self):
        status = volume_status(10, "forearms")
        assert status.status == "unknown"
        assert severity(status.status) == -1

    @pytest.mark.parametrize("muscle", sorted(VOLUME_LANDMARKS))
    def test_severity_never_decreases_with_more_sets(self, muscle):
        levels = [severity(volume_status(v, muscle).status) for v in range(0, 60)]
        assert levels == sorted(levels)


class TestVolumeRecommendation:
    def test_add_sets_when_low(self):
        rec = volume_recommendation(5, "back")
        assert rec["shouldAddVolume"] is True
        assert rec["setsToAdd"] == 5

    def test_hold_when_optimal(self):
        assert volume_recommendation(12, "back")["setsToAdd"] == 0

    def test_remove_sets_when_too_high(self):
        rec = volume_recommendation(30, "biceps")
        assert rec["shouldReduceVolume"] is True
        assert rec["setsToRemove"] == 16


class TestWeeklyVolume:
    def test_counts_sets_on_matching_muscles(self, workout, exercise_log):
        week = [
            workout(1, [exercise_log("Bench Press", ["Chest"], sets=[(185, 8, 8)] * 4)]),
            workout(3, [
                exercise_log("Cable Fly", ["Chest"], sets=[(40, 12, 8)] * 3),
                exercise_log("Lat Pulldown", ["Lats"], sets=[(120, 10, 8)] * 3),
            ]),
        ]
        assert weekly_volume(week, "chest") == 7
        # back is tracked through its aliases
        assert weekly_volume(week, "back") == 3
        assert weekly_volume(week, "quads") == 0

    def test_planned_sets_count_without_logs(self, workout):
        from coach.schemas.history import ExerciseLog

        week = [workout(0, [ExerciseLog(name="Squat", primaryMuscles=["Quadriceps"], sets=5)])]
        assert weekly_volume(week, "quads") == 5


class TestFrequency:
    def test_frequency_targets(self, workout, exercise_log):
        chest_day = lambda d: workout(d, [exercise_log("Bench Press", ["Chest"])])

        once = frequency_status([chest_day(1)], "chest", "hypertrophy")
        assert once.status == "too_low"
        assert "below the 2x/week target" in once.message

        assert frequency_status([chest_day(1), chest_day(4)], "chest", "hypertrophy").status == "optimal"
        assert frequency_status([chest_day(1), chest_day(3), chest_day(5)], "chest").status == "high"

    def test_strength_wants_more_frequency(self, workout, exercise_log):
        days = [workout(d, [exercise_log("Squat", ["Quadriceps"])]) for d in (1, 4)]
        status = frequency_status(days, "quads", "strength")
        assert status.status == "too_low"
        assert "Increase to 4x/week" in status.recommendation


class TestImbalances:
    def test_push_pull_imbalance_comes_first(self):
        imbalances = detect_imbalances({"chest": 12, "back": 4})
        assert [i.type for i in imbalances] == ["PUSH_PULL_IMBALANCE", "LOW_VOLUME"]
        assert imbalances[1].musclesAffected == ["back"]

    def test_leg_neglect(self):
        imbalances = detect_imbalances({"chest": 10, "back": 10, "shoulders": 8, "quads": 6})
        assert any(i.type == "LEG_NEGLECT" for i in imbalances)

    def test_balanced_week(self):
        assert detect_imbalances({"chest": 10, "back": 12, "quads": 10, "hamstrings": 8}) == []


class TestVolumeReport:
    def test_report_over_a_week(self, workout, exercise_log):
        week = [
            workout(1, [exercise_log("Bench Press", ["Chest"], sets=[(185, 8, 8)] * 12)]),
            workout(4, [exercise_log("Barbell Row", ["Lats"], sets=[(155, 8, 8)] * 2)]),
        ]
        report = volume_report(week, "hypertrophy")

        assert report.totalWorkouts == 2
        assert report.overallStatus == "undertraining"
        assert report.muscleAnalysis["chest"].weeklyVolume == 12
        assert report.muscleAnalysis["chest"].volumeStatus.status == "optimal"
        assert any(w.startswith("BACK:") for w in report.warnings)
        assert report.imbalances[0].type == "PUSH_PULL_IMBALANCE"

    def test_empty_week(self):
        report = volume_report([], "general")
        assert report.totalWorkouts == 0
        assert report.overallStatus == "undertraining"
