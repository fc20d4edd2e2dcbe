"""Editor-side logic for Novelist: pagination, persistence and the relay client."""
from .measurement import LayoutMeasurer, TextMetrics
from .storage import KeyValueStore, MemoryStore, JsonFileStore
from .relay_client import RelayClient, RelayError
from .pagination import PaginationController, PendingCompletion
from .shell import NovelistApp

__all__ = [
    'LayoutMeasurer',
    'TextMetrics',
    'KeyValueStore',
    'MemoryStore',
    'JsonFileStore',
    'RelayClient',
    'RelayError',
    'PaginationController',
    'PendingCompletion',
    'NovelistApp',
]
