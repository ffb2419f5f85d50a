from typing import Iterable

from .base import OrbitStore, StarStore
from nightsky.engine.types import OrbitalElements, StarRenderRow


def _in_box(star: StarRenderRow, min_corner, max_corner) -> bool:
    return all(lo <= v <= hi for v, lo, hi in zip(star.position, min_corner, max_corner))


class InMemoryStarStore(StarStore):
    name = "memory"

    def __init__(self, stars: Iterable[StarRenderRow] = ()):
        self._stars = {star.star_id: star for star in stars}
        self._ordered = sorted(self._stars.values(), key=lambda s: (s.abs_mag, s.star_id))

    def stars_in_box(self, dataset, min_corner, max_corner):
        for star in self._ordered:
            if dataset is not None and star.dataset != dataset:
                continue
            if _in_box(star, min_corner, max_corner):
                yield star

    def get_star(self, star_id):
        return self._stars.get(star_id)


class InMemoryOrbitStore(OrbitStore):
    name = "memory"

    def __init__(self, elements: dict[str, OrbitalElements] | None = None):
        self._elements = dict(elements or {})

    def get_orbital_elements(self, planet_id):
        return self._elements.get(planet_id)
