"""Turn OpenAI-style tool calls into ``role="tool"`` messages.

Failures never escape: they become the text the model reads back.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from ..errors import CoachError, ToolNotFoundError
from .tools import ToolRegistry

logger = logging.getLogger(__name__)


def _call_parts(call: dict) -> tuple[str, str, str]:
    # accepts both {"id", "function": {"name", "arguments"}} and flat {"id", "name", "arguments"}
    function = call.get("function") or call
    return call.get("id", ""), function.get("name", ""), function.get("arguments") or ""


def _encode(result: Any) -> str:
    if isinstance(result, str):
        return result
    return json.dumps(result, default=str)


async def run_tool_call(registry: ToolRegistry, call: dict) -> dict:
    call_id, name, raw_args = _call_parts(call)
    try:
        params = json.loads(raw_args) if raw_args else {}
    except json.JSONDecodeError:
        params = {}

    try:
        result = await registry.execute(name, params)
        content = _encode(result)
    except ToolNotFoundError:
        content = f"Error: Unknown tool '{name}'"
    except ValidationError as e:
        content = f"Error: invalid arguments for {name}: {e.error_count()} validation error(s). {e}"
    except CoachError as e:
        logger.info("Tool %s returned an error: %s", name, e.user_message)
        content = f"Error: {e.user_message}"
    except Exception as e:
        logger.exception("Tool %s failed", name)
        content = f"Tool error: {e}"

    return {"role": "tool", "tool_call_id": call_id, "content": content}


async def run_tool_calls(registry: ToolRegistry, tool_calls: list[dict]) -> list[dict]:
    """Execute calls one after another, in the order the model issued them."""
    return [await run_tool_call(registry, call) for call in tool_calls]
