from contextlib import closing
import datetime
import sqlite3

import pytest

from nightsky.engine import (
    EphemerisService,
    NightSkyCacheService,
    NightSkyService,
    OrbitalElements,
    StarQueryService,
    StarRenderRow,
    TimeContext,
    TimeService,
)
from nightsky.engine.cache import ExpiryPolicy
from nightsky.stores import InMemoryOrbitStore, InMemoryStarStore, SqliteStarStore

J2000 = datetime.datetime(2000, 1, 1, 12, 0, 0, tzinfo=datetime.timezone.utc)


def pytest_addoption(parser):
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run tests marked as integration",
    )


def pytest_collection_modifyitems(config, items):
    if config.getoption("--integration"):
        return

    for item in items:
        if "integration" in item.keywords:
            item.add_marker(
                pytest.mark.skip(
                    reason="need --integration option to run integration tests"
                )
            )


class FakeClock:
    def __init__(self, start: datetime.datetime = J2000):
        self.now = start

    def __call__(self) -> datetime.datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += datetime.timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def time_context():
    context = TimeContext().initialize()
    yield context
    context.teardown()


@pytest.fixture
def time_service(time_context):
    return TimeService(time_context)


@pytest.fixture
def circular_orbit():
    return OrbitalElements(
        semi_major_axis_au=1.0,
        eccentricity=0.0,
        inclination_rad=0.0,
        argument_of_periapsis_rad=0.0,
        longitude_of_ascending_node_rad=0.0,
        orbital_period_days=365.25,
    )


@pytest.fixture
def star_store():
    return InMemoryStarStore(
        [
            StarRenderRow("sol", 0.0, 0.0, 0.0, 4.83, 5772.0, "G2V", "Sol", "local"),
            StarRenderRow("polar", 0.0, 0.0, 10.0, 1.0, 9000.0, "A0V", "Polaris B", "local"),
            StarRenderRow("antipolar", 0.0, 0.0, -10.0, 1.0, None, "K1III", "Down Under", "local"),
            StarRenderRow("far", 0.0, 0.0, 200.0, -5.0, 20000.0, "B1", "Too Far", "local"),
        ]
    )


@pytest.fixture
def orbit_store(circular_orbit):
    return InMemoryOrbitStore({"earthlike": circular_orbit, "twin": circular_orbit})


@pytest.fixture
def cache(clock):
    return NightSkyCacheService(ExpiryPolicy(), clock=clock)


@pytest.fixture
def night_sky(star_store, orbit_store, time_service, cache, clock):
    ephemeris = EphemerisService(star_store, orbit_store, time_service)
    return NightSkyService(ephemeris, StarQueryService(star_store), cache=cache, clock=clock)


@pytest.fixture
def star_db(tmp_path):
    db_path = tmp_path / "stars.db"
    with closing(sqlite3.connect(db_path)) as conn:
        conn.executescript(SqliteStarStore.SCHEMA)
        conn.executemany(
            "INSERT INTO stars (id, dataset, x, y, z, abs_mag, temperature, spectral_class, name)"
            " VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
            [
                ("sol", "local", 0.0, 0.0, 0.0, 4.83, 5772.0, "G2V", "Sol"),
                ("polar", "local", 0.0, 0.0, 10.0, 1.0, 9000.0, "A0V", "Polaris B"),
                ("dim", "local", 3.0, 0.0, 8.0, 9.0, None, None, None),
                ("remote", "survey", 0.0, 5.0, 5.0, -1.0, 30000.0, "O9", "Beacon"),
            ],
        )
        conn.executemany(
            "INSERT INTO planets (id, host_star_id, semi_major_axis_au, eccentricity,"
            " inclination_deg, argument_of_periapsis_deg, longitude_of_ascending_node_deg,"
            " orbital_period_days, rotation_period_hours) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
            [
                ("earthlike", "sol", 1.0, 0.0, 0.0, 0.0, 0.0, 365.25, 24.0),
                ("sparse", "sol", None, None, None, None, None, None, None),
                ("broken", "sol", 1.0, 1.5, 0.0, 0.0, 0.0, 365.25, 24.0),
            ],
        )
        conn.commit()
    return db_path
