"""
Core Protocol Interfaces

Contracts for collaborators the core depends on but does not own:

    - PlatformAdapterProtocol: sending replies to a chat platform
    - SessionProcessorProtocol: the agent processing pipeline
    - MemoryStoreProtocol: workspace-scoped memory persistence
    - FastPathSearchProtocol: external line search tools
"""

from chatbridge.core.interfaces.memory_store import MemoryStoreProtocol
from chatbridge.core.interfaces.platform import PlatformAdapterProtocol
from chatbridge.core.interfaces.search import FastPathSearchProtocol
from chatbridge.core.interfaces.session import SessionProcessorProtocol

__all__ = [
    "FastPathSearchProtocol",
    "MemoryStoreProtocol",
    "PlatformAdapterProtocol",
    "SessionProcessorProtocol",
]
