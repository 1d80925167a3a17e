"""Typed inputs for the agent's tools."""

from enum import Enum
from typing import Any, Dict, Literal, Optional, Union
from pydantic import BaseModel, Field


class MemoryCategory(str, Enum):
    """Kinds of durable user preference."""
    PREFERENCE = "preference"
    PATTERN = "pattern"
    STYLE = "style"
    CONSTRAINT = "constraint"


class WriteFileInput(BaseModel):
    tool: Literal["write_file"] = "write_file"
    path: str = Field(..., min_length=1)
    content: str


class ReadFileInput(BaseModel):
    tool: Literal["read_file"] = "read_file"
    path: str = Field(..., min_length=1)


class SaveMemoryInput(BaseModel):
    tool: Literal["save_memory"] = "save_memory"
    content: str = Field(..., min_length=1)
    category: MemoryCategory


class RecallMemoryInput(BaseModel):
    tool: Literal["recall_memory"] = "recall_memory"
    query: str


ToolInput = Union[WriteFileInput, ReadFileInput, SaveMemoryInput, RecallMemoryInput]

_INPUT_TYPES = {
    "write_file": WriteFileInput,
    "read_file": ReadFileInput,
    "save_memory": SaveMemoryInput,
    "recall_memory": RecallMemoryInput,
}


def parse_tool_input(name: str, raw: Dict[str, Any]) -> Optional[ToolInput]:
    """
    Validate a raw tool payload against the declared tool's input type.

    Returns None for unknown tool names. Raises pydantic.ValidationError
    when the payload does not match.
    """
    input_type = _INPUT_TYPES.get(name)
    if input_type is None:
        return None
    return input_type.model_validate({**raw, "tool": name})
