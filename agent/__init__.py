"""Prototyping agent: tool-calling loop, tools and prompts."""

from .host import DisplayHost
from .prompts import AgentMode, MODES, get_system_prompt, get_mode_prompt, list_modes
from .tools import (
    Tool,
    ToolResult,
    ToolExecutor,
    WriteFileTool,
    ReadFileTool,
    SaveMemoryTool,
    RecallMemoryTool,
    get_tools,
    sanitize_script,
)
from .service import AgentService, FALLBACK_PROJECT_NAME

__all__ = [
    "DisplayHost",
    "AgentMode",
    "MODES",
    "get_system_prompt",
    "get_mode_prompt",
    "list_modes",
    "Tool",
    "ToolResult",
    "ToolExecutor",
    "WriteFileTool",
    "ReadFileTool",
    "SaveMemoryTool",
    "RecallMemoryTool",
    "get_tools",
    "sanitize_script",
    "AgentService",
    "FALLBACK_PROJECT_NAME",
]
