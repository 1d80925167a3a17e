"""JSON file memory store for project conversations and global preferences."""

import json
import random
import string
import logging
from pathlib import Path
from typing import Optional, List, Union

from project.paths import ProjectPaths
from schemas.conversation import ConversationTurn, ChatMessage, now_ms
from schemas.tool_inputs import MemoryCategory
from .models import ProjectMemory, GlobalMemory, GlobalMemoryEntry

logger = logging.getLogger(__name__)

MEMORY_DIR = "memory"
PROJECT_MEMORY_FILE = "memory.json"
GLOBAL_MEMORY_FILE = "global-memory.json"

# Older turns beyond this are dropped; the project summary covers them instead.
MAX_PERSISTED_TURNS = 50
MAX_GLOBAL_ENTRIES = 100

_ID_ALPHABET = string.ascii_lowercase + string.digits


def _new_entry_id() -> str:
    suffix = "".join(random.choices(_ID_ALPHABET, k=6))
    return f"mem-{now_ms()}-{suffix}"


class MemoryStore:
    """
    File-backed memory store.

    Project memory lives at <prototypes>/<project_id>/memory/memory.json and
    global memory at <app_data_dir>/global-memory.json. Every write rewrites
    the whole document; there is no locking, so concurrent writers to the
    same file are last-write-wins.
    """

    def __init__(
        self,
        paths: ProjectPaths,
        app_data_dir: Union[str, Path],
        max_persisted_turns: int = MAX_PERSISTED_TURNS
    ):
        """
        Initialize memory store.

        Args:
            paths: Project path resolver
            app_data_dir: Directory for the global memory file
            max_persisted_turns: Conversation turns kept when saving
        """
        self.paths = paths
        self.app_data_dir = Path(app_data_dir)
        self.max_persisted_turns = max_persisted_turns

    # ---- Project memory ----

    def _project_memory_dir(self, project_id: str) -> Path:
        return self.paths.resolve(project_id) / MEMORY_DIR

    def _project_memory_path(self, project_id: str) -> Path:
        return self._project_memory_dir(project_id) / PROJECT_MEMORY_FILE

    def _write_project_memory(self, memory: ProjectMemory):
        directory = self._project_memory_dir(memory.project_id)
        directory.mkdir(parents=True, exist_ok=True)
        self._project_memory_path(memory.project_id).write_text(
            json.dumps(memory.model_dump(mode="json", by_alias=True), indent=2),
            encoding="utf-8"
        )

    def load_project_memory(self, project_id: str) -> Optional[ProjectMemory]:
        """
        Load a project's memory record.

        Args:
            project_id: Project ID

        Returns:
            ProjectMemory, or None if missing or unreadable
        """
        try:
            path = self._project_memory_path(project_id)
            if not path.exists():
                return None
            raw = json.loads(path.read_text(encoding="utf-8"))
            return ProjectMemory.model_validate(raw)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load project memory for {project_id}: {e}")
            return None

    def save_project_memory(
        self,
        project_id: str,
        conversation_history: List[ConversationTurn],
        chat_messages: List[ChatMessage],
        summary: Optional[str] = None,
        key_facts: Optional[List[str]] = None
    ):
        """
        Persist a project's conversation state, keeping only the newest turns.

        Args:
            project_id: Project ID
            conversation_history: Full model-facing history
            chat_messages: Display messages
            summary: Optional conversation summary
            key_facts: Optional key facts
        """
        history = list(conversation_history)
        if len(history) > self.max_persisted_turns:
            history = history[-self.max_persisted_turns:]

        memory = ProjectMemory(
            project_id=project_id,
            conversation_history=history,
            chat_messages=list(chat_messages),
            summary=summary,
            key_facts=list(key_facts or []),
            last_updated=now_ms()
        )
        self._write_project_memory(memory)

    def update_project_summary(self, project_id: str, summary: str):
        """Set the summary on an existing record; no-op if there is none."""
        existing = self.load_project_memory(project_id)
        if not existing:
            return

        existing.summary = summary
        existing.last_updated = now_ms()
        self._write_project_memory(existing)

    def add_project_key_fact(self, project_id: str, fact: str):
        """Append a key fact unless already present; no-op without a record."""
        existing = self.load_project_memory(project_id)
        if not existing:
            return

        if fact in existing.key_facts:
            return

        existing.key_facts.append(fact)
        existing.last_updated = now_ms()
        self._write_project_memory(existing)

    # ---- Global memory ----

    def _global_memory_path(self) -> Path:
        return self.app_data_dir / GLOBAL_MEMORY_FILE

    def load_global_memory(self) -> GlobalMemory:
        """Load global memory; empty when missing or unreadable."""
        path = self._global_memory_path()
        try:
            if not path.exists():
                return GlobalMemory()
            raw = json.loads(path.read_text(encoding="utf-8"))
            return GlobalMemory.model_validate(raw)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable global memory at {path}: {e}")
            return GlobalMemory()

    def save_global_memory(self, memory: GlobalMemory):
        """Rewrite the global memory file."""
        self.app_data_dir.mkdir(parents=True, exist_ok=True)
        self._global_memory_path().write_text(
            json.dumps(memory.model_dump(mode="json", by_alias=True), indent=2),
            encoding="utf-8"
        )

    def add_global_memory_entry(
        self,
        content: str,
        category: MemoryCategory,
        source: str = ""
    ) -> GlobalMemoryEntry:
        """
        Add a global memory entry.

        Content is deduplicated case-insensitively: a duplicate returns the
        stored entry untouched. When the ledger exceeds its cap the entries
        with the oldest created_at are evicted.

        Args:
            content: Fact or preference to remember
            category: Memory category
            source: Originating project ID

        Returns:
            The new entry, or the existing duplicate
        """
        memory = self.load_global_memory()

        lowered = content.lower()
        for entry in memory.entries:
            if entry.content.lower() == lowered:
                return entry

        entry = GlobalMemoryEntry(
            id=_new_entry_id(),
            content=content,
            category=MemoryCategory(category),
            created_at=now_ms(),
            source=source
        )
        memory.entries.append(entry)
        memory.last_updated = now_ms()

        while len(memory.entries) > MAX_GLOBAL_ENTRIES:
            oldest = min(memory.entries, key=lambda e: e.created_at)
            memory.entries.remove(oldest)
            logger.info(f"Evicted global memory entry {oldest.id}")

        self.save_global_memory(memory)
        return entry

    def remove_global_memory_entry(self, entry_id: str) -> bool:
        """Remove an entry by id. Returns True if something was removed."""
        memory = self.load_global_memory()
        remaining = [e for e in memory.entries if e.id != entry_id]

        if len(remaining) == len(memory.entries):
            return False

        memory.entries = remaining
        memory.last_updated = now_ms()
        self.save_global_memory(memory)
        return True

    def search_global_memory(self, query: str) -> List[GlobalMemoryEntry]:
        """Case-insensitive substring match on content or category."""
        lowered = query.lower()
        return [
            e for e in self.load_global_memory().entries
            if lowered in e.content.lower() or lowered in e.category.value
        ]
