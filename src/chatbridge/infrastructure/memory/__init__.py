"""Memory persistence implementations."""

from chatbridge.infrastructure.memory.jsonl_memory_store import JsonlMemoryStore

__all__ = ["JsonlMemoryStore"]
