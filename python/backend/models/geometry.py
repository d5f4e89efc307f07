"""Plain geometry shared by the packer, the hit-test registry and frontends."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class CanvasSize:
    """Size of the surface items are packed onto, in pixels."""

    width: float
    height: float

    @property
    def center(self) -> Point:
        return Point(self.width / 2, self.height / 2)


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle anchored at its top-left corner."""

    left: float
    top: float
    width: float
    height: float

    # -- construction helpers -------------------------------------------------

    @classmethod
    def from_center(cls, cx: float, cy: float, width: float, height: float) -> Rect:
        return cls(cx - width / 2, cy - height / 2, width, height)

    # -- derived edges --------------------------------------------------------

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def center(self) -> Point:
        return Point(self.left + self.width / 2, self.top + self.height / 2)

    # -- queries --------------------------------------------------------------

    def contains(self, point: Point) -> bool:
        """Edges count as inside, so a drop exactly on a border still hits."""
        return (
            self.left <= point.x <= self.right
            and self.top <= point.y <= self.bottom
        )

    def contains_rect(self, other: Rect) -> bool:
        return (
            other.left >= self.left
            and other.right <= self.right
            and other.top >= self.top
            and other.bottom <= self.bottom
        )

    def overlaps(self, other: Rect, margin: float = 0.0) -> bool:
        """AABB test where the boxes must be more than *margin* apart to pass.

        Touching boxes (gap exactly equal to *margin*) count as overlapping.
        """
        return not (
            self.right + margin < other.left
            or self.left - margin > other.right
            or self.bottom + margin < other.top
            or self.top - margin > other.bottom
        )

    def inset(self, amount: float) -> Rect:
        """Shrink by *amount* on every side (negative grows)."""
        return Rect(
            self.left + amount,
            self.top + amount,
            self.width - 2 * amount,
            self.height - 2 * amount,
        )

    def distance_sq(self, point: Point) -> float:
        c = self.center
        return (c.x - point.x) ** 2 + (c.y - point.y) ** 2
