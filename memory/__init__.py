"""Memory system for conversation and preference persistence."""

from .models import ProjectMemory, GlobalMemory, GlobalMemoryEntry
from .store import MemoryStore, MAX_PERSISTED_TURNS, MAX_GLOBAL_ENTRIES

__all__ = [
    "ProjectMemory",
    "GlobalMemory",
    "GlobalMemoryEntry",
    "MemoryStore",
    "MAX_PERSISTED_TURNS",
    "MAX_GLOBAL_ENTRIES",
]
