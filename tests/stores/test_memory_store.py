from nightsky.config import Config
from nightsky.stores import (
    InMemoryOrbitStore,
    InMemoryStarStore,
    SqliteStarStore,
    get_stores,
)


def test_memory_store_orders_and_filters(star_store):
    stars = list(star_store.stars_in_box(None, (-20.0, -20.0, -20.0), (20.0, 20.0, 20.0)))
    assert [s.star_id for s in stars] == ["antipolar", "polar", "sol"]
    assert list(star_store.stars_in_box("other", (-20.0, -20.0, -20.0), (20.0, 20.0, 20.0))) == []


def test_memory_orbit_store(orbit_store, circular_orbit):
    assert orbit_store.get_orbital_elements("earthlike") == circular_orbit
    assert orbit_store.get_orbital_elements("missing") is None


def test_get_stores_without_path_is_empty():
    star_store, orbit_store = get_stores(Config({}))
    assert isinstance(star_store, InMemoryStarStore)
    assert isinstance(orbit_store, InMemoryOrbitStore)
    assert star_store.get_star("sol") is None


def test_get_stores_with_sqlite_path(star_db):
    star_store, orbit_store = get_stores(Config({"store": {"path": str(star_db)}}))
    assert isinstance(star_store, SqliteStarStore)
    assert orbit_store is star_store
    assert star_store.get_star("sol").name == "Sol"
