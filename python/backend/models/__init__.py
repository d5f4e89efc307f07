from backend.models.errors import ConfigurationError, PlacementError
from backend.models.geometry import CanvasSize, Point, Rect
from backend.models.items import LabelSpec, PlacedItem, StyleHint
from backend.models.level import GameDefinition, KnowledgeCard, Level, RegionSpec
from backend.models.progress import ProgressStore
from backend.models.rules import GameRules, ReturnPolicy, TimeoutScope
from backend.models.session import GameSession, GameState

__all__ = [
    "CanvasSize",
    "ConfigurationError",
    "GameDefinition",
    "GameRules",
    "GameSession",
    "GameState",
    "KnowledgeCard",
    "LabelSpec",
    "Level",
    "PlacedItem",
    "PlacementError",
    "Point",
    "ProgressStore",
    "Rect",
    "RegionSpec",
    "ReturnPolicy",
    "StyleHint",
    "TimeoutScope",
]
