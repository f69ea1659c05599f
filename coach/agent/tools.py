"""Tool registry.

Tools are registered on an explicit ``ToolRegistry`` instance at startup
(see ``coach.agent.handlers.init_registry``) and exposed to the calling
agent in OpenAI function-calling format. Every tool has a pydantic request
model; ``execute`` validates raw arguments into it before the handler runs.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from pydantic import BaseModel

from ..errors import ToolNotFoundError

logger = logging.getLogger(__name__)


class ToolName(str, Enum):
    GENERATE_WORKOUT_PLAN = "generateWorkoutPlan"
    GENERATE_WORKOUT_PROGRAM = "generateWorkoutProgram"
    FIND_EXERCISE_ALTERNATIVES = "findExerciseAlternatives"
    SEARCH_EXERCISES = "searchExercises"
    GET_EXERCISE_INFO = "getExerciseInfo"
    GET_RECENT_WORKOUTS = "getRecentWorkouts"
    ANALYZE_WORKOUT_HISTORY = "analyzeWorkoutHistory"
    RECOMMEND_TODAYS_WORKOUT = "recommendTodaysWorkout"
    ANALYZE_WEEKLY_VOLUME = "analyzeWeeklyVolume"
    GET_PROGRESSIVE_OVERLOAD_ADVICE = "getProgressiveOverloadAdvice"
    CHECK_DELOAD_STATUS = "checkDeloadStatus"
    ANALYZE_EXERCISE_PROGRESSION = "analyzeExerciseProgression"
    DETECT_PROGRESS_PLATEAU = "detectProgressPlateau"
    GET_EXERCISE_STATS = "getExerciseStats"
    CALCULATE_ONE_REP_MAX = "calculate1RM"
    CALCULATE_PERCENTAGE_1RM = "calculatePercentage1RM"
    PREDICT_PROGRESSION = "predictProgression"
    GENERATE_WARMUP_SETS = "generateWarmupSets"


@dataclass
class ToolSpec:
    name: ToolName
    request_model: type[BaseModel]
    handler: Callable[[Any], Any]
    description: str
    step_label: str = ""

    @property
    def schema(self) -> dict:
        parameters = self.request_model.model_json_schema()
        parameters.pop("title", None)
        return {
            "type": "function",
            "function": {
                "name": self.name.value,
                "description": self.description,
                "parameters": parameters,
            },
        }


def _resolve(name: ToolName | str) -> ToolName:
    if isinstance(name, ToolName):
        return name
    try:
        return ToolName(name)
    except ValueError:
        raise ToolNotFoundError(str(name)) from None


class ToolRegistry:
    def __init__(self) -> None:
        self._tools: dict[ToolName, ToolSpec] = {}

    def register(
        self,
        name: ToolName | str,
        request_model: type[BaseModel],
        handler: Callable[[Any], Any],
        description: str = "",
        step_label: str = "",
    ) -> ToolSpec:
        """Add a tool. Registering an existing name replaces it in place."""
        tool = _resolve(name)
        spec = ToolSpec(
            name=tool,
            request_model=request_model,
            handler=handler,
            description=description or (inspect.getdoc(handler) or "").split("\n\n")[0],
            step_label=step_label or tool.value,
        )
        self._tools[tool] = spec
        return spec

    def schemas(self) -> list[ToolSpec]:
        """Registered tools, in registration order."""
        return list(self._tools.values())

    def get_openai_tools(self) -> list[dict]:
        """Return all tool schemas in OpenAI function-calling format."""
        return [spec.schema for spec in self._tools.values()]

    def get(self, name: ToolName | str) -> ToolSpec:
        tool = _resolve(name)
        spec = self._tools.get(tool)
        if spec is None:
            raise ToolNotFoundError(tool.value)
        return spec

    def has(self, name: ToolName | str) -> bool:
        try:
            self.get(name)
        except ToolNotFoundError:
            return False
        return True

    def names(self) -> list[str]:
        return [tool.value for tool in self._tools]

    def __len__(self) -> int:
        return len(self._tools)

    async def execute(self, name: ToolName | str, args: dict | BaseModel | None = None) -> Any:
        """Validate ``args`` and run the tool's handler once.

        Raises:
            ToolNotFoundError: ``name`` is not a registered tool.
            pydantic.ValidationError: ``args`` do not fit the request model.

        Anything the handler raises propagates unchanged.
        """
        spec = self.get(name)
        if isinstance(args, spec.request_model):
            request = args
        else:
            payload = args.model_dump() if isinstance(args, BaseModel) else (args or {})
            request = spec.request_model.model_validate(payload)

        logger.info("Executing tool: %s", spec.name.value)
        if inspect.iscoroutinefunction(spec.handler):
            return await spec.handler(request)
        return await asyncio.to_thread(spec.handler, request)
