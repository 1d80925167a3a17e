"""Tests for the JSON memory store."""

import json
import pytest

from memory.store import MemoryStore, MAX_GLOBAL_ENTRIES
from memory.models import GlobalMemory, GlobalMemoryEntry
from project.paths import ProjectPaths
from schemas.conversation import ConversationTurn, ChatMessage, TextBlock, ToolUseBlock, Role
from schemas.tool_inputs import MemoryCategory


def make_turn(i: int) -> ConversationTurn:
    role = Role.USER if i % 2 == 0 else Role.ASSISTANT
    return ConversationTurn(role=role, content=[TextBlock(text=f"turn {i}")])


class TestProjectMemory:
    """Test per-project persistence."""

    @pytest.fixture(autouse=True)
    def setup(self, tmp_path):
        """Set up test fixtures."""
        self.tmp_path = tmp_path
        self.paths = ProjectPaths(tmp_path)
        self.store = MemoryStore(self.paths, tmp_path)

    def test_load_missing_returns_none(self):
        """Test loading an unknown project returns None."""
        assert self.store.load_project_memory("nope") is None

    def test_round_trip(self):
        """Test a saved record loads back unchanged."""
        history = [
            make_turn(0),
            ConversationTurn(role=Role.ASSISTANT, content=[
                TextBlock(text="Writing"),
                ToolUseBlock(id="tu_1", name="write_file", input={"path": "app.jsx", "content": "x"}),
            ]),
        ]
        messages = [ChatMessage(id="m1", role=Role.USER, content="Build me a dashboard", timestamp=1)]

        self.store.save_project_memory("p1", history, messages, "A dashboard", ["dark theme"])
        loaded = self.store.load_project_memory("p1")

        assert loaded is not None
        assert loaded.project_id == "p1"
        assert loaded.conversation_history == history
        assert loaded.chat_messages == messages
        assert loaded.summary == "A dashboard"
        assert loaded.key_facts == ["dark theme"]
        assert loaded.last_updated > 0

    def test_history_trimmed_to_tail(self):
        """Test only the newest turns are persisted."""
        history = [make_turn(i) for i in range(60)]
        self.store.save_project_memory("p1", history, [])

        loaded = self.store.load_project_memory("p1")
        assert len(loaded.conversation_history) == 50
        assert loaded.conversation_history == history[-50:]

    def test_file_layout_uses_camel_case(self):
        """Test the memory file uses camelCase keys."""
        self.store.save_project_memory("p1", [make_turn(0)], [], None, [])
        path = self.tmp_path / "prototypes" / "p1" / "memory" / "memory.json"

        raw = json.loads(path.read_text())
        assert set(raw) == {
            "projectId", "conversationHistory", "chatMessages", "summary", "keyFacts", "lastUpdated"
        }
        assert raw["conversationHistory"][0] == {
            "role": "user", "content": [{"type": "text", "text": "turn 0"}]
        }

    def test_corrupt_file_returns_none(self):
        """Test an unreadable memory file loads as None."""
        path = self.tmp_path / "prototypes" / "p1" / "memory" / "memory.json"
        path.parent.mkdir(parents=True)
        path.write_text("{not json")

        assert self.store.load_project_memory("p1") is None

    def test_update_summary_without_record_is_noop(self):
        """Test updating a summary needs an existing record."""
        self.store.update_project_summary("p1", "summary")
        assert self.store.load_project_memory("p1") is None

    def test_update_summary_merges(self):
        """Test updating a summary keeps the rest of the record."""
        self.store.save_project_memory("p1", [make_turn(0)], [], None, ["fact"])
        self.store.update_project_summary("p1", "new summary")

        loaded = self.store.load_project_memory("p1")
        assert loaded.summary == "new summary"
        assert loaded.key_facts == ["fact"]
        assert len(loaded.conversation_history) == 1

    def test_add_key_fact_is_idempotent(self):
        """Test a key fact is stored once."""
        self.store.save_project_memory("p1", [], [])
        self.store.add_project_key_fact("p1", "uses tailwind")
        self.store.add_project_key_fact("p1", "uses tailwind")
        self.store.add_project_key_fact("p1", "mobile layout")

        assert self.store.load_project_memory("p1").key_facts == ["uses tailwind", "mobile layout"]

    def test_add_key_fact_without_record_is_noop(self):
        """Test adding a key fact needs an existing record."""
        self.store.add_project_key_fact("p1", "fact")
        assert self.store.load_project_memory("p1") is None

    def test_last_write_wins(self):
        """Test a later save replaces the earlier one."""
        self.store.save_project_memory("p1", [make_turn(0)], [], "first")
        self.store.save_project_memory("p1", [make_turn(1)], [], "second")

        loaded = self.store.load_project_memory("p1")
        assert loaded.summary == "second"
        assert loaded.conversation_history == [make_turn(1)]


class TestGlobalMemory:
    """Test the cross-project preference ledger."""

    @pytest.fixture(autouse=True)
    def setup(self, tmp_path):
        """Set up test fixtures."""
        self.tmp_path = tmp_path
        self.store = MemoryStore(ProjectPaths(tmp_path), tmp_path / "appdata")

    def test_load_missing_returns_empty(self):
        """Test a missing global file loads as empty."""
        memory = self.store.load_global_memory()
        assert memory.entries == []
        assert memory.last_updated == 0

    def test_load_corrupt_returns_empty(self):
        """Test a corrupt global file loads as empty."""
        (self.tmp_path / "appdata").mkdir()
        (self.tmp_path / "appdata" / "global-memory.json").write_text("[]]")

        assert self.store.load_global_memory().entries == []

    def test_add_entry_persists(self):
        """Test a new entry is written to disk."""
        entry = self.store.add_global_memory_entry("Prefers dark themes", MemoryCategory.STYLE, "p1")

        assert entry.id.startswith("mem-")
        assert entry.source == "p1"
        assert entry.created_at > 0
        assert self.store.load_global_memory().entries == [entry]

    def test_duplicate_content_returns_existing(self):
        """Test duplicate content returns the existing entry."""
        first = self.store.add_global_memory_entry("Use Inter font", MemoryCategory.STYLE, "p1")
        second = self.store.add_global_memory_entry("use inter FONT", MemoryCategory.PREFERENCE, "p2")

        assert second == first
        assert len(self.store.load_global_memory().entries) == 1

    def test_cap_evicts_oldest(self):
        """Test the oldest entry is evicted at the cap."""
        entries = [
            GlobalMemoryEntry(
                id=f"mem-{i}",
                content=f"fact {i}",
                category=MemoryCategory.PATTERN,
                created_at=1000 + i,
                source="p1"
            )
            for i in range(MAX_GLOBAL_ENTRIES)
        ]
        # Oldest entry is not first in file order
        entries[0].created_at, entries[5].created_at = entries[5].created_at, entries[0].created_at
        self.store.save_global_memory(GlobalMemory(entries=entries, last_updated=1))

        new_entry = self.store.add_global_memory_entry("fact new", MemoryCategory.PATTERN, "p1")

        ids = [e.id for e in self.store.load_global_memory().entries]
        assert len(ids) == MAX_GLOBAL_ENTRIES
        assert "mem-5" not in ids
        assert "mem-0" in ids
        assert new_entry.id in ids

    def test_remove_entry(self):
        """Test removing an entry by id."""
        entry = self.store.add_global_memory_entry("Rounded corners", MemoryCategory.STYLE)

        assert self.store.remove_global_memory_entry(entry.id) is True
        assert self.store.load_global_memory().entries == []

    def test_remove_missing_entry_does_not_write(self):
        """Test removing an unknown id leaves the file alone."""
        assert self.store.remove_global_memory_entry("mem-missing") is False
        assert not (self.tmp_path / "appdata" / "global-memory.json").exists()

    def test_search_matches_content_and_category(self):
        """Test search matches content and category case-insensitively."""
        self.store.add_global_memory_entry("Prefers dark themes", MemoryCategory.STYLE)
        self.store.add_global_memory_entry("No external packages", MemoryCategory.CONSTRAINT)

        assert [e.content for e in self.store.search_global_memory("DARK")] == ["Prefers dark themes"]
        assert [e.content for e in self.store.search_global_memory("constraint")] == ["No external packages"]
        assert self.store.search_global_memory("font") == []

    def test_write_errors_propagate(self):
        """Test write failures reach the caller."""
        blocker = self.tmp_path / "appdata"
        blocker.write_text("not a directory")

        with pytest.raises(OSError):
            self.store.save_global_memory(GlobalMemory())
