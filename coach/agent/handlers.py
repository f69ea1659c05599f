"""Tool handlers.

``CoachTools`` binds the training engines to a history provider and the
exercise catalog. ``init_registry`` registers one handler per ``ToolName``.
Handlers return JSON-ready dicts and raise ``CoachError`` subclasses for
failures the agent should see.
"""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import Callable, Sequence

from ..providers import HistoryProvider, utc_now
from ..schemas.exercise import Exercise
from ..schemas.requests import (
    AnalyzeExerciseProgressionRequest,
    AnalyzeWeeklyVolumeRequest,
    AnalyzeWorkoutHistoryRequest,
    Calculate1RMRequest,
    CalculatePercentage1RMRequest,
    CheckDeloadStatusRequest,
    DetectProgressPlateauRequest,
    FindExerciseAlternativesRequest,
    GenerateWarmupSetsRequest,
    GenerateWorkoutPlanRequest,
    GenerateWorkoutProgramRequest,
    GetExerciseInfoRequest,
    GetExerciseStatsRequest,
    GetProgressiveOverloadAdviceRequest,
    GetRecentWorkoutsRequest,
    PredictProgressionRequest,
    RecommendTodaysWorkoutRequest,
    SearchExercisesRequest,
)
from ..training import catalog as exercise_catalog
from ..training.deload import calculate_training_weeks, has_deloaded_recently, needs_deload_week
from ..training.generator import find_alternatives, generate_plan, generate_program
from ..training.history import analyze_workout_history, exercise_stats, recommend_todays_workout
from ..training.progression import (
    analyze_progression_trend,
    detect_plateau,
    extract_sessions,
    progression_report,
    recommend_next,
    scan_plateaus,
    session_volume,
)
from ..training.strength import (
    estimate_one_rep_max,
    generate_warmup_sets,
    percentage_of_max,
    predict_progression,
)
from ..training.volume import VOLUME_LANDMARKS, frequency_status, volume_report, volume_status, weekly_volume
from .tools import ToolName, ToolRegistry

OVERLOAD_WINDOW_DAYS = 30
DELOAD_WINDOW_DAYS = 60
PROGRESSION_WINDOW_DAYS = 90
RECOMMENDATION_WINDOW_DAYS = 30
SCHEDULED_DELOAD_WEEK = 4


def _exercise_summary(ex: Exercise) -> dict:
    return {
        "name": ex.name,
        "equipment": ex.equipment,
        "muscles": ex.primaryMuscles,
        "difficulty": ex.difficulty,
    }


def _fmt(value: float) -> str:
    return f"{value:g}"


class CoachTools:
    def __init__(
        self,
        provider: HistoryProvider,
        catalog: Sequence[Exercise] | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.provider = provider
        self._catalog = tuple(catalog) if catalog is not None else None
        self.clock = clock

    @property
    def catalog(self) -> tuple[Exercise, ...]:
        if self._catalog is None:
            self._catalog = exercise_catalog.get_all_exercises()
        return self._catalog

    # --- catalog and planning -------------------------------------------

    def generate_workout_plan(self, request: GenerateWorkoutPlanRequest) -> dict:
        """Generate a single workout for the given muscle groups or split (push, pull, legs, upper, lower)."""
        plan = generate_plan(request, self.catalog)
        return {"workout": {**plan.model_dump(mode="json"), "totalExercises": plan.totalExercises}}

    def generate_workout_program(self, request: GenerateWorkoutProgramRequest) -> dict:
        """Generate a multi-day training program (3 to 6 days uses a dedicated split)."""
        program = generate_program(request.days, self.catalog, request.experienceLevel, request.goal)
        return {"program": program.model_dump(mode="json")}

    def find_exercise_alternatives(self, request: FindExerciseAlternativesRequest) -> dict:
        """Find up to five exercises that train the same primary muscles."""
        original, alternatives = find_alternatives(
            request.exerciseName, self.catalog, request.equipment, request.muscleGroup
        )
        return {
            "original": original.name,
            "alternatives": [_exercise_summary(ex) for ex in alternatives],
        }

    def search_exercises(self, request: SearchExercisesRequest) -> dict:
        """Search the exercise catalog by text, muscle, equipment or difficulty."""
        results = exercise_catalog.search(
            self.catalog,
            query=request.query,
            muscle_group=request.muscleGroup,
            equipment=request.equipment,
            difficulty=request.difficulty,
            limit=request.limit,
        )
        return {"count": len(results), "exercises": [_exercise_summary(ex) for ex in results]}

    def get_exercise_info(self, request: GetExerciseInfoRequest) -> dict:
        """Full catalog entry for one exercise, including instructions."""
        exercise = exercise_catalog.find_exercise(request.exerciseName, self.catalog)
        return {"exercise": exercise.model_dump(mode="json")}

    # --- history ----------------------------------------------------------

    async def get_recent_workouts(self, request: GetRecentWorkoutsRequest) -> dict:
        """List the user's logged workouts from the last N days, newest first."""
        workouts = await self.provider.get_workouts(request.userId, request.days)
        workouts = sorted(workouts, key=lambda w: w.date, reverse=True)[: request.limit]
        return {
            "count": len(workouts),
            "workouts": [w.model_dump(mode="json") for w in workouts],
        }

    async def analyze_workout_history(self, request: AnalyzeWorkoutHistoryRequest) -> dict:
        """Summarize training totals, volume and most/least trained muscles."""
        workouts = await self.provider.get_workouts(request.userId, request.days)
        analysis = analyze_workout_history(workouts, request.days, now=self.clock())
        return {"analysis": analysis.model_dump(mode="json", exclude_none=True)}

    async def recommend_todays_workout(self, request: RecommendTodaysWorkoutRequest) -> dict:
        """Recommend what to train today from muscle balance, program sequence and recovery."""
        workouts = await self.provider.get_workouts(request.userId, RECOMMENDATION_WINDOW_DAYS)
        recommendation = recommend_todays_workout(workouts, self.clock())
        return {"recommendation": recommendation.model_dump(mode="json", exclude_none=True)}

    # --- volume and progression -------------------------------------------

    async def analyze_weekly_volume(self, request: AnalyzeWeeklyVolumeRequest) -> dict:
        """Weekly sets and frequency for one muscle group, or a full report with 'all'."""
        workouts = await self.provider.get_workouts(request.userId, request.timeframe)
        if not workouts:
            return {
                "volume": 0,
                "status": "no_data",
                "message": f"No workouts found in the last {request.timeframe} days.",
                "recommendation": "Start training to build a baseline!",
            }

        if request.muscleGroup != "all":
            sets = weekly_volume(workouts, request.muscleGroup)
            vstatus = volume_status(sets, request.muscleGroup)
            fstatus = frequency_status(workouts, request.muscleGroup, request.goal)
            landmarks = VOLUME_LANDMARKS.get(request.muscleGroup)
            return {
                "muscleGroup": request.muscleGroup,
                "weeklyVolume": sets,
                "volumeStatus": vstatus.status,
                "volumeMessage": vstatus.message,
                "volumeRecommendation": vstatus.recommendation,
                "frequency": fstatus.frequency,
                "frequencyMessage": fstatus.message,
                "frequencyRecommendation": fstatus.recommendation,
                "landmarks": asdict(landmarks) if landmarks else None,
                "totalWorkouts": len(workouts),
            }

        return {"report": volume_report(workouts, request.goal).model_dump(mode="json")}

    async def get_progressive_overload_advice(self, request: GetProgressiveOverloadAdviceRequest) -> dict:
        """Next weight, reps and sets for an exercise based on the last session."""
        workouts = await self.provider.get_workouts(request.userId, OVERLOAD_WINDOW_DAYS)
        if not workouts:
            return {
                "status": "no_history",
                "message": "No workout history found. Start with a comfortable weight at RPE 7-8.",
                "recommendation": (
                    "Choose a weight where you can complete all reps with 2-3 reps left in the tank."
                ),
            }

        sessions = extract_sessions(workouts, request.exerciseName)
        if not sessions:
            return {
                "status": "no_exercise_history",
                "message": f'No history found for "{request.exerciseName}". This will be your first session.',
                "recommendation": (
                    "Start with a conservative weight at RPE 7 (3 reps left in reserve) "
                    "to establish a baseline."
                ),
            }

        last = sessions[-1]
        nxt = recommend_next(last, last.targetRepRange)
        trend = analyze_progression_trend(sessions) if len(sessions) >= 2 else None
        return {
            "exerciseName": request.exerciseName,
            "lastSession": {
                "date": last.date.isoformat() if last.date else None,
                "performance": f"{_fmt(last.weight)} lbs × {last.reps} reps @ RPE {_fmt(last.rpe or 8)}",
                "sets": last.sets,
            },
            "nextRecommendation": {
                "weight": nxt.nextWeight,
                "reps": nxt.nextReps,
                "sets": nxt.nextSets,
                "reason": nxt.reason,
                "progressionType": nxt.progressionType,
                "change": nxt.changeAmount,
                "warning": nxt.warning,
            },
            "trend": (
                {"status": trend.trend, "message": trend.message, "recommendation": trend.recommendation}
                if trend
                else None
            ),
            "totalSessions": len(sessions),
        }

    async def check_deload_status(self, request: CheckDeloadStatusRequest) -> dict:
        """Whether the user is due a deload week, and why."""
        workouts = await self.provider.get_workouts(request.userId, DELOAD_WINDOW_DAYS)
        if not workouts:
            return {
                "needsDeload": False,
                "message": "No workout history found. Start training first!",
                "trainingWeeks": 0,
            }

        weeks = calculate_training_weeks(workouts)
        next_in = f"{max(0, SCHEDULED_DELOAD_WEEK - weeks)} weeks"
        if has_deloaded_recently(workouts, self.clock()):
            return {
                "needsDeload": False,
                "message": "You deloaded recently (within last 2 weeks). Continue regular training.",
                "trainingWeeks": weeks,
                "nextDeloadIn": next_in,
            }

        status = needs_deload_week(workouts, weeks)
        message = (
            f"DELOAD WEEK RECOMMENDED: {status.reason}"
            if status.needsDeload
            else f"Continue training. Deload in {next_in}."
        )
        return {
            **status.model_dump(mode="json"),
            "trainingWeeks": weeks,
            "nextDeloadIn": next_in,
            "message": message,
        }

    async def analyze_exercise_progression(self, request: AnalyzeExerciseProgressionRequest) -> dict:
        """Long-term trend and next prescription for one exercise.

        Raises InsufficientHistory with fewer than two logged sessions.
        """
        workouts = await self.provider.get_workouts(request.userId, PROGRESSION_WINDOW_DAYS)
        sessions = extract_sessions(workouts, request.exerciseName)
        report = progression_report(request.exerciseName, sessions)

        first, last = sessions[0], sessions[-1]
        first_volume, last_volume = session_volume(first), session_volume(last)
        change = (last_volume - first_volume) / first_volume * 100 if first_volume else 0.0
        return {
            "exerciseName": request.exerciseName,
            "status": report.trend.trend,
            "totalSessions": report.totalSessions,
            "firstSession": {
                "date": first.date.isoformat() if first.date else None,
                "performance": f"{_fmt(first.weight)} lbs × {first.reps} reps",
            },
            "lastSession": {
                "date": last.date.isoformat() if last.date else None,
                "performance": f"{_fmt(last.weight)} lbs × {last.reps} reps",
            },
            "volumeChange": f"{'+' if change > 0 else ''}{change:.1f}%",
            "trend": report.trend.model_dump(mode="json"),
            "nextRecommendation": report.nextRecommendation.model_dump(mode="json"),
        }

    async def detect_progress_plateau(self, request: DetectProgressPlateauRequest) -> dict:
        """Check one exercise for a strength plateau, or scan every logged exercise."""
        workouts = await self.provider.get_workouts(request.userId, request.timeframe)
        if request.exerciseName:
            analysis = detect_plateau(workouts, request.exerciseName)
            return {"plateau": analysis.model_dump(mode="json")}

        plateaus = scan_plateaus(workouts)
        return {"plateaus": plateaus, "count": len(plateaus), "timeframe": request.timeframe}

    async def get_exercise_stats(self, request: GetExerciseStatsRequest) -> dict:
        """Personal records, totals and recent top weights for one exercise."""
        workouts = await self.provider.get_workouts(request.userId, request.days)
        stats = exercise_stats(workouts, request.exerciseName)
        return {"stats": stats.model_dump(mode="json", exclude_none=True)}

    # --- strength maths ---------------------------------------------------

    def calculate_one_rep_max(self, request: Calculate1RMRequest) -> dict:
        """Estimate a one rep max (1RM) from a set of 1-12 reps.

        Use when the user gives a weight and reps and asks for their max.
        """
        estimate = estimate_one_rep_max(request.weight, request.reps, request.exerciseName)
        return estimate.model_dump(mode="json", exclude_none=True)

    def calculate_percentage_1rm(self, request: CalculatePercentage1RMRequest) -> dict:
        """Weight for a percentage of a known 1RM, for percentage-based programs such as 5/3/1."""
        load = percentage_of_max(request.oneRepMax, request.percentage, request.exerciseName)
        return load.model_dump(mode="json")

    def predict_progression(self, request: PredictProgressionRequest) -> dict:
        """Predict how many weeks of linear progression it takes to reach a target weight."""
        prediction = predict_progression(
            request.currentWeight,
            request.currentReps,
            request.targetWeight,
            request.exerciseName,
            request.experienceLevel,
        )
        return prediction.model_dump(mode="json")

    def generate_warmup_sets(self, request: GenerateWarmupSetsRequest) -> dict:
        """Warm-up sets to ramp up to the working weight."""
        plan = generate_warmup_sets(request.workingWeight, request.workingReps, request.exerciseName)
        return plan.model_dump(mode="json")


_TOOL_TABLE: tuple[tuple[ToolName, type, str, str], ...] = (
    (ToolName.GENERATE_WORKOUT_PLAN, GenerateWorkoutPlanRequest, "generate_workout_plan", "Building workout"),
    (ToolName.GENERATE_WORKOUT_PROGRAM, GenerateWorkoutProgramRequest, "generate_workout_program", "Building program"),
    (ToolName.FIND_EXERCISE_ALTERNATIVES, FindExerciseAlternativesRequest, "find_exercise_alternatives", "Finding alternatives"),
    (ToolName.SEARCH_EXERCISES, SearchExercisesRequest, "search_exercises", "Searching exercises"),
    (ToolName.GET_EXERCISE_INFO, GetExerciseInfoRequest, "get_exercise_info", "Looking up exercise"),
    (ToolName.GET_RECENT_WORKOUTS, GetRecentWorkoutsRequest, "get_recent_workouts", "Loading recent workouts"),
    (ToolName.ANALYZE_WORKOUT_HISTORY, AnalyzeWorkoutHistoryRequest, "analyze_workout_history", "Analyzing history"),
    (ToolName.RECOMMEND_TODAYS_WORKOUT, RecommendTodaysWorkoutRequest, "recommend_todays_workout", "Choosing today's workout"),
    (ToolName.ANALYZE_WEEKLY_VOLUME, AnalyzeWeeklyVolumeRequest, "analyze_weekly_volume", "Analyzing weekly volume"),
    (ToolName.GET_PROGRESSIVE_OVERLOAD_ADVICE, GetProgressiveOverloadAdviceRequest, "get_progressive_overload_advice", "Calculating next weight"),
    (ToolName.CHECK_DELOAD_STATUS, CheckDeloadStatusRequest, "check_deload_status", "Checking deload status"),
    (ToolName.ANALYZE_EXERCISE_PROGRESSION, AnalyzeExerciseProgressionRequest, "analyze_exercise_progression", "Analyzing progression"),
    (ToolName.DETECT_PROGRESS_PLATEAU, DetectProgressPlateauRequest, "detect_progress_plateau", "Checking for plateaus"),
    (ToolName.GET_EXERCISE_STATS, GetExerciseStatsRequest, "get_exercise_stats", "Loading exercise stats"),
    (ToolName.CALCULATE_ONE_REP_MAX, Calculate1RMRequest, "calculate_one_rep_max", "Estimating 1RM"),
    (ToolName.CALCULATE_PERCENTAGE_1RM, CalculatePercentage1RMRequest, "calculate_percentage_1rm", "Calculating load"),
    (ToolName.PREDICT_PROGRESSION, PredictProgressionRequest, "predict_progression", "Predicting progress"),
    (ToolName.GENERATE_WARMUP_SETS, GenerateWarmupSetsRequest, "generate_warmup_sets", "Building warm-up"),
)


def init_registry(registry: ToolRegistry, tools: CoachTools) -> ToolRegistry:
    """Register every coach tool on ``registry`` and return it."""
    for name, model, attr, label in _TOOL_TABLE:
        registry.register(name, model, getattr(tools, attr), step_label=label)
    return registry
