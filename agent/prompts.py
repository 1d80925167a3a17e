"""System prompt composition for the prototyping agent."""

from typing import Dict, List, Optional, Sequence
from pydantic import BaseModel

from memory.models import GlobalMemoryEntry
from schemas.tool_inputs import MemoryCategory


class AgentMode(BaseModel):
    """A named behavioral preset."""
    id: str
    name: str
    description: str
    prompt: str


MODES: Dict[str, AgentMode] = {
    "rapid-prototype": AgentMode(
        id="rapid-prototype",
        name="Rapid Prototype",
        description="Fast iterations with minimal mock data",
        prompt="""**Rapid Prototype Mode**
- Prioritize speed over polish
- Minimal mock data (3-5 items)
- Simple layouts
- Desktop-first (can adjust later)""",
    ),
    "mobile-first": AgentMode(
        id="mobile-first",
        name="Mobile First",
        description="Touch-friendly layouts designed for small screens",
        prompt="""**Mobile-First Mode**
- Design for mobile screens first
- Touch-friendly interactions
- Mobile navigation patterns (bottom tabs, hamburger menus)
- Responsive scaling to larger screens""",
    ),
    "data-heavy": AgentMode(
        id="data-heavy",
        name="Data Heavy",
        description="Tables, charts and large realistic datasets",
        prompt="""**Data-Heavy Mode**
- Extensive mock data (20+ items)
- Tables, charts, and data visualizations
- Filtering and search capabilities
- Pagination or infinite scroll""",
    ),
    "presentation": AgentMode(
        id="presentation",
        name="Presentation",
        description="Polished, animated marketing-style pages",
        prompt="""**Presentation Mode**
- High visual polish
- Smooth animations and transitions
- Marketing-style landing pages
- Hero sections, testimonials, etc.""",
    ),
}

BASE_PROMPT = """You are an expert UI/UX prototyping assistant. You generate interactive, high-fidelity prototypes as a single app.jsx file.

## Runtime Environment

The prototype runs in a browser via a static HTML page that loads these CDN scripts:
- **React 18** and **ReactDOM 18** as UMD globals (window.React, window.ReactDOM)
- **Babel Standalone** (transpiles JSX in-browser via <script type="text/babel">)
- **Tailwind CSS Play CDN** (all utility classes available)

## CRITICAL RULES

1. **NO imports**: React and ReactDOM are globals. Destructure what you need:
   `const { useState, useEffect, useRef, useMemo, useCallback, useContext, createContext } = React;`
2. **NO TypeScript**: write plain JSX only (.jsx files)
3. **NO external packages**: everything must be self-contained. Use inline SVG for icons.
4. **Single file**: put ALL code in app.jsx. Define components in dependency order (helpers first, App last).
5. **Always end with render call**:
   `ReactDOM.createRoot(document.getElementById("root")).render(<App />);`
6. **NO export statements**: no `export default`, no `export function`, no module syntax.

## Routing (Multi-Page Apps)

For multi-page prototypes, use hash-based routing: read `window.location.hash` in a
`useHashRoute` hook that listens to `hashchange`, render `<a href="#/path">` links,
and switch on the route inside `App`.

## Styling

- Use **TailwindCSS utility classes** for all styling
- For custom styles, use inline styles or a <style> tag in the component

## Code Quality

- Write complete, working code, no pseudocode or placeholders
- Use semantic HTML with proper accessibility attributes
- Mock data should be realistic and varied
- All interactive elements should work (buttons, forms, toggles, etc.)
- Use modern React patterns (hooks, functional components)

## Available Tools

- **write_file**: write app.jsx (or other static assets) to the prototype directory
- **read_file**: read existing files to check current state before modifying
- **save_memory**: remember a user preference, pattern, style or constraint across projects
- **recall_memory**: search remembered preferences"""

RESPONSE_STYLE = """## Response Style

1. Briefly explain what you're building
2. Use write_file to generate app.jsx with all code
3. Summarize what you created
4. Suggest next steps"""

CATEGORY_TITLES = {
    MemoryCategory.PREFERENCE: "Preferences",
    MemoryCategory.PATTERN: "Patterns",
    MemoryCategory.STYLE: "Style",
    MemoryCategory.CONSTRAINT: "Constraints",
}


def list_modes() -> List[AgentMode]:
    """Available modes in display order."""
    return list(MODES.values())


def get_mode_prompt(mode: str) -> str:
    """Mode-specific guidance; empty for unknown modes."""
    preset = MODES.get(mode)
    return preset.prompt if preset else ""


def _format_global_entries(entries: Sequence[GlobalMemoryEntry]) -> str:
    sections = []
    for category in MemoryCategory:
        items = [e.content for e in entries if e.category == category]
        if items:
            lines = "\n".join(f"- {item}" for item in items)
            sections.append(f"### {CATEGORY_TITLES[category]}\n{lines}")
    return "\n\n".join(sections)


def get_system_prompt(
    mode: str,
    project_id: str,
    summary: Optional[str] = None,
    key_facts: Optional[Sequence[str]] = None,
    global_entries: Optional[Sequence[GlobalMemoryEntry]] = None
) -> str:
    """
    Build the system prompt.

    Pure function: identical inputs always produce the identical string.

    Args:
        mode: Mode id; unknown modes add no mode block
        project_id: Current project ID
        summary: Summary of earlier sessions on this project
        key_facts: Facts established for this project
        global_entries: Cross-project remembered preferences

    Returns:
        System prompt text
    """
    parts = [
        BASE_PROMPT,
        f"## Current Project\n\nProject ID: {project_id}\nMode: {mode}",
    ]

    mode_prompt = get_mode_prompt(mode)
    if mode_prompt:
        parts.append(mode_prompt)

    if summary:
        parts.append(f"## Previous Session\n\n{summary}")

    if key_facts:
        facts = "\n".join(f"- {fact}" for fact in key_facts)
        parts.append(f"## Key Facts\n\n{facts}")

    if global_entries:
        formatted = _format_global_entries(global_entries)
        if formatted:
            parts.append(
                "## Remembered Preferences\n\n"
                "Apply these user preferences from earlier projects unless told otherwise.\n\n"
                f"{formatted}"
            )

    parts.append(RESPONSE_STYLE)
    return "\n\n".join(parts)
