"""HTTP surface over the tool registry.

Mount in the app:
    app.include_router(router)
The registry is read from ``app.state.registry``.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, HTTPException, Request
from pydantic import BaseModel, ValidationError

from .agent.dispatch import run_tool_calls
from .agent.tools import ToolName, ToolRegistry
from .errors import CoachError, ExerciseNotFound, ToolNotFoundError, ValidationFailed
from .schemas.requests import GenerateWorkoutPlanRequest, GenerateWorkoutProgramRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["coach"])


class ToolCallsRequest(BaseModel):
    tool_calls: list[dict]


def _registry(request: Request) -> ToolRegistry:
    return request.app.state.registry


async def _execute(registry: ToolRegistry, name: ToolName | str, args: dict | BaseModel) -> Any:
    try:
        return await registry.execute(name, args)
    except (ToolNotFoundError, ExerciseNotFound) as e:
        raise HTTPException(status_code=404, detail=e.user_message)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))
    except ValidationFailed as e:
        raise HTTPException(
            status_code=422,
            detail={"message": e.user_message, "offending": e.offending, "errors": e.errors},
        )
    except CoachError as e:
        raise HTTPException(status_code=400, detail=e.user_message)


@router.get("/tools")
async def list_tools(request: Request):
    """Tool schemas in OpenAI function-calling format."""
    return _registry(request).get_openai_tools()


@router.post("/tools/{name}")
async def execute_tool(name: str, request: Request, args: dict | None = Body(default=None)):
    return await _execute(_registry(request), name, args or {})


@router.post("/tool-calls")
async def tool_calls(body: ToolCallsRequest, request: Request):
    """Run model-issued tool calls and return the ``role="tool"`` messages."""
    return {"messages": await run_tool_calls(_registry(request), body.tool_calls)}


@router.post("/workouts/plan")
async def workout_plan(body: GenerateWorkoutPlanRequest, request: Request):
    return await _execute(_registry(request), ToolName.GENERATE_WORKOUT_PLAN, body)


@router.post("/workouts/program")
async def workout_program(body: GenerateWorkoutProgramRequest, request: Request):
    return await _execute(_registry(request), ToolName.GENERATE_WORKOUT_PROGRAM, body)
