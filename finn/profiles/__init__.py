"""User memory profiles and their persistence."""
from .store import ProfileStore, InMemoryProfileStore, JsonProfileStore
from .memory import build_memory_profile

__all__ = ["ProfileStore", "InMemoryProfileStore", "JsonProfileStore", "build_memory_profile"]
