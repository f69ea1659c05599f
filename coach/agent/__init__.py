from .dispatch import run_tool_call, run_tool_calls
from .handlers import CoachTools, init_registry
from .tools import ToolName, ToolRegistry, ToolSpec

__all__ = [
    "CoachTools",
    "ToolName",
    "ToolRegistry",
    "ToolSpec",
    "init_registry",
    "run_tool_call",
    "run_tool_calls",
]
