import logging
import math

from .types import LevelOfDetail, StarRenderRow, Vector3

logger = logging.getLogger(__name__)


class StarQueryService:
    def __init__(self, star_store):
        self._store = star_store

    def query_candidates(
        self,
        center: Vector3,
        radius_ly: float,
        dataset: str | None,
        lod: LevelOfDetail,
    ) -> list[StarRenderRow]:
        cx, cy, cz = center
        min_corner = (cx - radius_ly, cy - radius_ly, cz - radius_ly)
        max_corner = (cx + radius_ly, cy + radius_ly, cz + radius_ly)

        candidates: list[StarRenderRow] = []
        scanned = 0
        for star in self._store.stars_in_box(dataset, min_corner, max_corner):
            scanned += 1
            if math.dist(star.position, center) > radius_ly:
                continue
            if star.abs_mag > lod.magnitude_limit:
                continue
            candidates.append(star)
            if len(candidates) >= lod.max_stars:
                break

        logger.debug(
            "Star query: %d in box, %d kept (radius=%.1f ly, dataset=%s, lod=%s)",
            scanned,
            len(candidates),
            radius_ly,
            dataset,
            lod.name,
        )
        return candidates

    def get_host_star(self, star_id: str) -> StarRenderRow | None:
        return self._store.get_star(star_id)
