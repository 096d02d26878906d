from gql_extract.store.cache import InMemoryResultCache, get_or_compute
from gql_extract.store.memory import ComponentEvent, ComponentRecord, InMemoryComponentStore

__all__ = [
    "ComponentEvent",
    "ComponentRecord",
    "InMemoryComponentStore",
    "InMemoryResultCache",
    "get_or_compute",
]
