"""Tests for progressive overload rules, trends and plateau detection."""

from datetime import timedelta

import pytest

from coach.errors import InsufficientHistory
from coach.schemas.history import Session
from coach.training.progression import (
    FAILURE_WARNING,
    analyze_progression_trend,
    detect_plateau,
    extract_sessions,
    parse_rep_range,
    progression_increment,
    progression_report,
    recommend_next,
    scan_plateaus,
)


def _session(weight, reps, rpe, equipment="barbell", rep_range="8-12", **kwargs):
    return Session(weight=weight, reps=reps, rpe=rpe, sets=3, equipment=equipment, targetRepRange=rep_range, **kwargs)


class TestRecommendNext:
    def test_easy_session_adds_weight(self):
        rec = recommend_next(_session(185, 8, 7))
        assert rec.progressionType == "weight_increase"
        assert rec.nextWeight == 190
        assert rec.nextReps == 8
        assert rec.changeAmount == "+5 lbs"

    def test_hard_session_adds_a_rep(self):
        rec = recommend_next(_session(200, 8, 9))
        assert rec.progressionType == "rep_increase"
        assert rec.nextWeight == 200
        assert rec.nextReps == 9

    def test_top_of_range_adds_weight_and_drops_reps(self):
        rec = recommend_next(_session(185, 12, 9))
        assert rec.progressionType == "weight_increase_with_rep_drop"
        assert (rec.nextWeight, rec.nextReps) == (190, 8)

    def test_failure_warns(self):
        rec = recommend_next(_session(185, 5, 10))
        assert rec.nextWeight == 185
        assert rec.nextReps == 6
        assert rec.warning == FAILURE_WARNING

    def test_dumbbell_increment(self):
        rec = recommend_next(_session(50, 10, 6, equipment="Dumbbell"))
        assert rec.nextWeight == 52.5
        assert rec.changeAmount == "+2.5 lbs"

    def test_bodyweight_progresses_by_reps(self):
        easy = recommend_next(_session(0, 10, 6, equipment="Bodyweight"))
        maxed = recommend_next(_session(0, 12, 8, equipment="Bodyweight"))
        assert easy.progressionType == maxed.progressionType == "rep_increase"
        assert easy.nextReps == 11
        assert maxed.nextWeight == 0

    def test_explicit_rep_range_overrides_session(self):
        rec = recommend_next(_session(225, 6, 8, rep_range="8-12"), "4-6")
        assert rec.progressionType == "weight_increase_with_rep_drop"
        assert rec.nextReps == 4

    @pytest.mark.parametrize("rpe", [None, 0, 11])
    def test_missing_or_invalid_rpe_maintains(self, rpe):
        rec = recommend_next(_session(185, 8, rpe))
        assert rec.progressionType == "maintain"
        assert rec.nextWeight == 185

    def test_helpers(self):
        assert parse_rep_range("6-10") == (6, 10)
        assert parse_rep_range("5") == (5, 5)
        assert parse_rep_range("heavy") == (8, 12)
        assert progression_increment("EZ Bar") == 5


class TestTrend:
    def test_single_session_is_neutral(self):
        assert analyze_progression_trend([_session(185, 8, 8)]).trend == "neutral"

    def test_progressing(self, now):
        sessions = [
            _session(185, 8, 8, date=now - timedelta(days=7)),
            _session(205, 8, 8, date=now),
        ]
        trend = analyze_progression_trend(sessions)
        assert trend.trend == "progressing"
        assert trend.percentChange == pytest.approx(10.8)

    def test_order_does_not_matter(self, now):
        sessions = [
            _session(185, 8, 8, date=now),
            _session(205, 8, 8, date=now - timedelta(days=7)),
        ]
        assert analyze_progression_trend(sessions).trend == "regressing"

    def test_stagnant(self, now):
        sessions = [_session(185, 8, 8, date=now - timedelta(days=d)) for d in (14, 7, 0)]
        assert analyze_progression_trend(sessions).trend == "stagnant"


class TestSessionsFromHistory:
    def test_extract_averages_sets(self, workout, exercise_log):
        history = [
            workout(2, [exercise_log("Barbell Bench Press", sets=[(185, 8, 8), (185, 7, 9), (175, 8, None)])]),
            workout(9, [exercise_log("Incline Bench Press", sets=[(135, 10, 7)])]),
            workout(5, [exercise_log("Squat", ["Quadriceps"], sets=[(225, 5, 8)])]),
        ]
        sessions = extract_sessions(history, "bench press")

        assert [s.exercise for s in sessions] == ["Incline Bench Press", "Barbell Bench Press"]
        latest = sessions[-1]
        assert latest.weight == pytest.approx(545 / 3)
        assert latest.reps == 8
        assert latest.rpe == pytest.approx(8.3)
        assert latest.targetRepRange == "8-12"

    def test_report_needs_two_sessions(self, workout, exercise_log):
        history = [workout(1, [exercise_log("Deadlift", sets=[(315, 5, 8)])])]
        with pytest.raises(InsufficientHistory) as exc:
            progression_report("Deadlift", extract_sessions(history, "deadlift"))
        assert exc.value.required == 2
        assert exc.value.found == 1

    def test_report(self, workout, exercise_log):
        history = [
            workout(7, [exercise_log("Deadlift", sets=[(305, 5, 8)] * 3)]),
            workout(0, [exercise_log("Deadlift", sets=[(315, 5, 7)] * 3)]),
        ]
        report = progression_report("Deadlift", extract_sessions(history, "deadlift"))
        assert report.totalSessions == 2
        assert report.lastSession["weight"] == 315
        assert report.nextRecommendation.nextWeight == 320
        assert report.trend.trend == "slow_progress"


class TestPlateau:
    def test_flat_top_weight_is_a_plateau(self, workout, exercise_log):
        history = [
            workout(d, [exercise_log("Bench Press", sets=[(w, 5, 8), (w - 20, 8, 8)])])
            for d, w in ((21, 200), (14, 200), (7, 202.5), (0, 200))
        ]
        analysis = detect_plateau(history, "bench press")
        assert analysis.isPlateau
        assert analysis.sessions == 4
        assert analysis.maximum == 202.5
        assert analysis.range == 2.5

    def test_climbing_weight_is_not(self, workout, exercise_log):
        history = [
            workout(d, [exercise_log("Squat", ["Quadriceps"], sets=[(w, 5, 8)])])
            for d, w in ((21, 225), (14, 235), (7, 245), (0, 255))
        ]
        assert not detect_plateau(history, "squat").isPlateau

    def test_needs_three_sessions(self, workout, exercise_log):
        history = [workout(d, [exercise_log("Squat", sets=[(225, 5, 8)])]) for d in (7, 0)]
        with pytest.raises(InsufficientHistory) as exc:
            detect_plateau(history, "squat")
        assert exc.value.required == 3

    def test_scan_all_exercises(self, workout, exercise_log):
        history = [
            workout(d, [
                exercise_log("Bench Press", sets=[(185, 8, 8)]),
                exercise_log("Squat", ["Quadriceps"], sets=[(w, 5, 8)]),
            ])
            for d, w in ((14, 225), (7, 250), (0, 275))
        ]
        plateaus = scan_plateaus(history)
        assert [p["exercise"] for p in plateaus] == ["Bench Press"]
        assert plateaus[0]["avgWeight"] == 185
