"""Label specs (content input) and placed items (packer output)."""

from __future__ import annotations

from dataclasses import dataclass, field

from backend.models.geometry import Rect


@dataclass(frozen=True)
class LabelSpec:
    """A piece of text the content layer wants placed.

    ``key`` is what the match validator compares; it defaults to the text
    itself.  ``font_size`` pins the size instead of letting the packer
    pick one at random.
    """

    text: str
    key: str = ""
    font_size: float | None = None
    is_target: bool = False

    def __post_init__(self) -> None:
        if not self.key:
            object.__setattr__(self, "key", self.text)


@dataclass(frozen=True)
class StyleHint:
    """Presentation hints for renderers; ``tone`` indexes a 4-colour palette."""

    font_size: float
    tone: int = 0


@dataclass(frozen=True)
class PlacedItem:
    """A label with a position on the canvas.

    ``x``/``y`` is the centre of the box.  Width and height are already
    swapped for vertical (90°) items.  Geometry is frozen; only
    ``resolved`` changes, through :meth:`mark_resolved`.
    """

    id: str
    label: str
    key: str
    is_target: bool
    x: float
    y: float
    width: float
    height: float
    rotation: int
    style_hint: StyleHint
    resolved: bool = field(default=False, compare=False)

    @property
    def bounds(self) -> Rect:
        return Rect.from_center(self.x, self.y, self.width, self.height)

    def mark_resolved(self) -> None:
        object.__setattr__(self, "resolved", True)
