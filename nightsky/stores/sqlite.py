"""
Read-only SQLite star and orbit store.

The database holds two tables, ``stars`` and ``planets`` (see SCHEMA). Each
query opens its own short-lived connection, so a single store instance can be
shared between worker threads. Rows are streamed from the cursor rather than
fetched all at once.
"""

from contextlib import closing
import logging
from pathlib import Path
import sqlite3

from .base import OrbitStore, StarStore
from nightsky.engine.types import OrbitalElements, StarRenderRow
from nightsky.errors import StoreError

logger = logging.getLogger(__name__)

# Orbital columns may be NULL; these fill the gaps.
_DEFAULT_SEMI_MAJOR_AXIS_AU = 1.0
_DEFAULT_ORBITAL_PERIOD_DAYS = 365.25

_STAR_COLUMNS = "id, x, y, z, abs_mag, temperature, spectral_class, name, dataset"


class SqliteStarStore(StarStore, OrbitStore):
    name = "sqlite"

    SCHEMA = """
    CREATE TABLE IF NOT EXISTS stars (
        id TEXT PRIMARY KEY,
        dataset TEXT,
        x REAL NOT NULL,
        y REAL NOT NULL,
        z REAL NOT NULL,
        abs_mag REAL NOT NULL,
        temperature REAL,
        spectral_class TEXT,
        name TEXT
    );

    CREATE TABLE IF NOT EXISTS planets (
        id TEXT PRIMARY KEY,
        host_star_id TEXT,
        semi_major_axis_au REAL,
        eccentricity REAL,
        inclination_deg REAL,
        argument_of_periapsis_deg REAL,
        longitude_of_ascending_node_deg REAL,
        orbital_period_days REAL,
        rotation_period_hours REAL
    );

    CREATE INDEX IF NOT EXISTS idx_stars_dataset ON stars(dataset);
    CREATE INDEX IF NOT EXISTS idx_stars_abs_mag ON stars(abs_mag);
    """

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path).expanduser()
        if not self.db_path.exists():
            raise StoreError(f"Star database not found: {self.db_path}")

    def _connect(self) -> sqlite3.Connection:
        uri = f"file:{self.db_path}?mode=ro"
        try:
            return sqlite3.connect(uri, uri=True)
        except sqlite3.Error as e:
            raise StoreError(f"Could not open star database {self.db_path}: {e}") from e

    def stars_in_box(self, dataset, min_corner, max_corner):
        sql = (
            f"SELECT {_STAR_COLUMNS} FROM stars"
            " WHERE x BETWEEN ? AND ? AND y BETWEEN ? AND ? AND z BETWEEN ? AND ?"
        )
        params: list = [
            min_corner[0],
            max_corner[0],
            min_corner[1],
            max_corner[1],
            min_corner[2],
            max_corner[2],
        ]
        if dataset is not None:
            sql += " AND dataset = ?"
            params.append(dataset)
        sql += " ORDER BY abs_mag, id"

        with closing(self._connect()) as conn:
            for row in conn.execute(sql, params):
                yield _row_to_star(row)

    def get_star(self, star_id):
        with closing(self._connect()) as conn:
            row = conn.execute(
                f"SELECT {_STAR_COLUMNS} FROM stars WHERE id = ?", (star_id,)
            ).fetchone()
        if row is None:
            return None
        return _row_to_star(row)

    def get_orbital_elements(self, planet_id):
        with closing(self._connect()) as conn:
            row = conn.execute(
                """
                SELECT semi_major_axis_au, eccentricity, inclination_deg,
                       argument_of_periapsis_deg, longitude_of_ascending_node_deg,
                       orbital_period_days, rotation_period_hours
                FROM planets WHERE id = ?
                """,
                (planet_id,),
            ).fetchone()
        if row is None:
            return None
        a, e, inc, peri, node, period, rotation = row
        try:
            return OrbitalElements.from_degrees(
                semi_major_axis_au=_DEFAULT_SEMI_MAJOR_AXIS_AU if a is None else a,
                eccentricity=0.0 if e is None else e,
                inclination_deg=inc or 0.0,
                argument_of_periapsis_deg=peri or 0.0,
                longitude_of_ascending_node_deg=node or 0.0,
                orbital_period_days=_DEFAULT_ORBITAL_PERIOD_DAYS if period is None else period,
                rotation_period_hours=rotation,
            )
        except ValueError as e:
            logger.warning("Ignoring invalid orbital elements for planet %s: %s", planet_id, e)
            return None


def _row_to_star(row: tuple) -> StarRenderRow:
    star_id, x, y, z, abs_mag, temperature, spectral_class, name, dataset = row
    return StarRenderRow(
        star_id=star_id,
        x=x,
        y=y,
        z=z,
        abs_mag=abs_mag,
        temperature_k=temperature,
        spectral_class=spectral_class or None,
        name=name or None,
        dataset=dataset,
    )
