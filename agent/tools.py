"""Tools the agent can call against a project sandbox."""

import re
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ValidationError

from memory.store import MemoryStore
from project.paths import ProjectPaths
from schemas.tool_inputs import (
    MemoryCategory,
    ToolInput,
    WriteFileInput,
    ReadFileInput,
    SaveMemoryInput,
    RecallMemoryInput,
    parse_tool_input,
)

logger = logging.getLogger(__name__)

# Files the preview runs as in-browser scripts with React as a global.
SCRIPT_EXTENSIONS = (".js", ".jsx", ".mjs")

_STRIPPED_LINE_PATTERNS = [
    re.compile(r"""^import\s+.*from\s+['"]react['"]"""),
    re.compile(r"""^import\s+.*from\s+['"]react-dom"""),
    re.compile(r"""^import\s+.*from\s+['"]react-router"""),
    re.compile(r"""^import\s+.*from\s+['"]node:"""),
    re.compile(r"^export\s+default\s+"),
]

MEMORY_UNAVAILABLE = "Memory system not available"


def sanitize_script(content: str) -> str:
    """
    Drop lines the browser preview cannot execute.

    Line-oriented: whole lines whose trimmed text starts with a React,
    react-dom, react-router or node: import, or with `export default`, are
    removed. Multi-line import statements are not detected.
    """
    kept = [
        line for line in content.split("\n")
        if not any(p.match(line.strip()) for p in _STRIPPED_LINE_PATTERNS)
    ]
    return "\n".join(kept)


def is_script_path(path: str) -> bool:
    return path.lower().endswith(SCRIPT_EXTENSIONS)


class ToolResult(BaseModel):
    """Result from tool execution."""
    tool_name: str
    success: bool
    result: Optional[str] = None
    error: Optional[str] = None


class Tool(ABC):
    """Abstract base class for tools."""
    name: str
    description: str
    parameters: Dict[str, Any]

    @abstractmethod
    def execute(self, tool_input: ToolInput, project_id: str) -> str:
        """Execute the tool and return its output for the model."""
        pass

    @classmethod
    def get_definition(cls) -> Dict:
        """Get Anthropic-style tool definition."""
        return {
            "name": cls.name,
            "description": cls.description,
            "input_schema": cls.parameters
        }


class WriteFileTool(Tool):
    """Write or overwrite a file in the project."""

    name = "write_file"
    description = (
        "Write or update a file in the current prototype project. Primarily used "
        "to write app.jsx with all components and rendering logic."
    )
    parameters = {
        "type": "object",
        "properties": {
            "path": {
                "type": "string",
                "description": 'Relative path in the prototype project (e.g., "app.jsx")'
            },
            "content": {
                "type": "string",
                "description": "Complete file content"
            }
        },
        "required": ["path", "content"]
    }

    def __init__(self, paths: ProjectPaths):
        self.paths = paths

    def execute(self, tool_input: WriteFileInput, project_id: str) -> str:
        full_path = self.paths.resolve(project_id, tool_input.path)
        full_path.parent.mkdir(parents=True, exist_ok=True)

        content = tool_input.content
        if is_script_path(tool_input.path):
            content = sanitize_script(content)

        full_path.write_text(content, encoding="utf-8")
        logger.info(f"Wrote {full_path} ({len(content)} chars)")
        return f"Successfully wrote {tool_input.path}"


class ReadFileTool(Tool):
    """Read a file from the project."""

    name = "read_file"
    description = (
        "Read the contents of a file in the current prototype project. Use this "
        "to check existing code before modifying it."
    )
    parameters = {
        "type": "object",
        "properties": {
            "path": {
                "type": "string",
                "description": 'Relative path to read (e.g., "app.jsx")'
            }
        },
        "required": ["path"]
    }

    def __init__(self, paths: ProjectPaths):
        self.paths = paths

    def execute(self, tool_input: ReadFileInput, project_id: str) -> str:
        full_path = self.paths.resolve(project_id, tool_input.path)
        if not full_path.is_file():
            return f"File not found: {tool_input.path}"
        return full_path.read_text(encoding="utf-8")


class SaveMemoryTool(Tool):
    """Store a cross-project user preference."""

    name = "save_memory"
    description = (
        "Save an important fact or user preference to persistent memory. Use this "
        "when the user expresses a preference, style choice, design pattern, or "
        "constraint that should be remembered across sessions. Examples: "
        '"User prefers dark themes", "Always use Inter font", '
        '"Components should have rounded corners".'
    )
    parameters = {
        "type": "object",
        "properties": {
            "content": {
                "type": "string",
                "description": "The fact or preference to remember"
            },
            "category": {
                "type": "string",
                "enum": [c.value for c in MemoryCategory],
                "description": (
                    "Category: preference (user likes/dislikes), pattern (code patterns "
                    "to follow), style (visual/design style), constraint (technical limitations)"
                )
            }
        },
        "required": ["content", "category"]
    }

    def __init__(self, memory_store: Optional[MemoryStore]):
        self.memory_store = memory_store

    def execute(self, tool_input: SaveMemoryInput, project_id: str) -> str:
        if not self.memory_store:
            return MEMORY_UNAVAILABLE

        entry = self.memory_store.add_global_memory_entry(
            content=tool_input.content,
            category=tool_input.category,
            source=project_id
        )
        return f'Saved to memory ({entry.category.value}): "{entry.content}"'


class RecallMemoryTool(Tool):
    """Search cross-project memories."""

    name = "recall_memory"
    description = (
        "Search saved memories for relevant information. Use this at the start of a "
        "new session or when you need to recall user preferences and past decisions."
    )
    parameters = {
        "type": "object",
        "properties": {
            "query": {
                "type": "string",
                "description": 'Search query to find relevant memories (e.g., "color", "font", "layout")'
            }
        },
        "required": ["query"]
    }

    def __init__(self, memory_store: Optional[MemoryStore]):
        self.memory_store = memory_store

    def execute(self, tool_input: RecallMemoryInput, project_id: str) -> str:
        if not self.memory_store:
            return MEMORY_UNAVAILABLE

        results = self.memory_store.search_global_memory(tool_input.query)
        if not results:
            return f'No memories found matching "{tool_input.query}"'

        formatted = "\n".join(f"- [{e.category.value}] {e.content}" for e in results)
        return f"Found {len(results)} memories:\n{formatted}"


TOOL_CLASSES = (WriteFileTool, ReadFileTool, SaveMemoryTool, RecallMemoryTool)


def get_tools() -> List[Dict]:
    """Tool declarations sent with every model request."""
    return [tool_cls.get_definition() for tool_cls in TOOL_CLASSES]


def _validation_message(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        location = ".".join(str(loc) for loc in err["loc"])
        parts.append(f"{location}: {err['msg']}")
    return "; ".join(parts)


class ToolExecutor:
    """Registry of the agent's tools and the single entry point for running them."""

    def __init__(self, paths: ProjectPaths, memory_store: Optional[MemoryStore] = None):
        """
        Initialize executor.

        Args:
            paths: Project path resolver; every file access goes through it
            memory_store: Memory store backing save_memory / recall_memory
        """
        tools: List[Tool] = [
            WriteFileTool(paths),
            ReadFileTool(paths),
            SaveMemoryTool(memory_store),
            RecallMemoryTool(memory_store),
        ]
        self.tools = {tool.name: tool for tool in tools}

    def get_tools(self) -> List[Dict]:
        return [tool.get_definition() for tool in self.tools.values()]

    def execute(self, name: str, tool_input: Dict[str, Any], project_id: str) -> ToolResult:
        """Run a registered tool, capturing any failure in the result."""
        try:
            parsed = parse_tool_input(name, tool_input or {})
            output = self.tools[name].execute(parsed, project_id)
            return ToolResult(tool_name=name, success=True, result=output)
        except ValidationError as e:
            logger.error(f"Invalid input for {name}: {e}")
            return ToolResult(tool_name=name, success=False, error=_validation_message(e))
        except Exception as e:
            logger.error(f"Tool {name} failed: {e}")
            return ToolResult(tool_name=name, success=False, error=str(e))

    async def execute_tool_call(
        self,
        name: str,
        tool_input: Dict[str, Any],
        project_id: str
    ) -> str:
        """
        Execute a named tool call and return its output as a string.

        Never raises: unknown tools resolve to "Unknown tool: <name>" and
        failures to "Error executing <name>: <message>", so the model can
        react to them in its next turn.
        """
        if name not in self.tools:
            logger.warning(f"Model requested unknown tool: {name}")
            return f"Unknown tool: {name}"

        result = self.execute(name, tool_input, project_id)
        if not result.success:
            return f"Error executing {name}: {result.error}"
        return result.result or ""
