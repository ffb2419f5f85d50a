from abc import ABC, abstractmethod
from typing import Iterator

from nightsky.engine.types import OrbitalElements, StarRenderRow, Vector3


class StarStore(ABC):
    name: str

    @abstractmethod
    def stars_in_box(
        self,
        dataset: str | None,
        min_corner: Vector3,
        max_corner: Vector3,
    ) -> Iterator[StarRenderRow]:
        """Yield stars inside the axis-aligned box, brightest first.

        A dataset of None means every dataset. Unknown datasets yield nothing.
        """
        raise NotImplementedError

    @abstractmethod
    def get_star(self, star_id: str) -> StarRenderRow | None:
        raise NotImplementedError


class OrbitStore(ABC):
    name: str

    @abstractmethod
    def get_orbital_elements(self, planet_id: str) -> OrbitalElements | None:
        raise NotImplementedError
