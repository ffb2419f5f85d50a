from .base import OrbitStore, StarStore
from .memory import InMemoryOrbitStore, InMemoryStarStore
from .sqlite import SqliteStarStore


def get_stores(config) -> tuple[StarStore, OrbitStore]:
    path = getattr(config, "store_path", None)
    if path is None:
        return InMemoryStarStore(), InMemoryOrbitStore()
    store = SqliteStarStore(path)
    return store, store


__all__ = [
    "StarStore",
    "OrbitStore",
    "InMemoryStarStore",
    "InMemoryOrbitStore",
    "SqliteStarStore",
    "get_stores",
]
