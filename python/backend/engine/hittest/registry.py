"""Named drop regions and point lookup."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass

from backend.models.geometry import Point, Rect

# Returns the region's current rectangle, or None while it is not on screen.
BoundsProvider = Callable[[], Rect | None]


@dataclass(frozen=True)
class Region:
    id: str
    bounds_provider: BoundsProvider
    accepts_key: str

    def bounds(self) -> Rect | None:
        return self.bounds_provider()


class HitTestRegistry:
    """Keeps drop regions in registration order and resolves points to them.

    Bounds are never cached: every :meth:`resolve` asks each provider
    again, so regions that moved or resized since registration are hit
    where they are now.  Where regions overlap the earliest registered
    one wins.
    """

    def __init__(self) -> None:
        self._regions: dict[str, Region] = {}

    def register(
        self,
        region_id: str,
        bounds_provider: BoundsProvider,
        accepts_key: str | None = None,
    ) -> Region:
        if region_id in self._regions:
            raise ValueError(f"Region {region_id!r} is already registered.")
        region = Region(region_id, bounds_provider, accepts_key or region_id)
        self._regions[region_id] = region
        return region

    def unregister(self, region_id: str) -> bool:
        return self._regions.pop(region_id, None) is not None

    def clear(self) -> None:
        self._regions.clear()

    def get(self, region_id: str) -> Region | None:
        return self._regions.get(region_id)

    def resolve(self, point: Point) -> str | None:
        for region in self._regions.values():
            rect = region.bounds()
            if rect is not None and rect.contains(point):
                return region.id
        return None

    def __contains__(self, region_id: object) -> bool:
        return region_id in self._regions

    def __iter__(self) -> Iterator[Region]:
        return iter(list(self._regions.values()))

    def __len__(self) -> int:
        return len(self._regions)
