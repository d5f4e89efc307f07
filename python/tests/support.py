"""Level and game builders shared by the test modules."""

from __future__ import annotations

from backend.models.level import GameDefinition, Level, RegionSpec
from backend.models.rules import GameRules

PHRASE = "領事保護"
DISTRACTORS = ["旅遊", "購物", "簽證", "學習", "代購", "糾紛", "天氣",
               "導遊", "機票", "酒店", "美食", "打卡", "領事", "保衛"]
ARCHIVE = "archive"


def make_levels(*phrases: str, distractors: list[str] | None = None) -> tuple[Level, ...]:
    extra = DISTRACTORS if distractors is None else distractors
    return tuple(
        Level.from_phrase(i, phrase, extra, hint=f"hint {i}")
        for i, phrase in enumerate(phrases, 1)
    )


def make_game(levels: tuple[Level, ...], **rule_overrides) -> GameDefinition:
    """A single-archive hidden-phrase game over *levels*."""
    return GameDefinition(
        name="test",
        title="Test",
        rules=GameRules(**rule_overrides),
        levels=levels,
        regions=(RegionSpec(ARCHIVE, "Archive"),),
        classification={k: ARCHIVE for lv in levels for k in lv.target_sequence},
    )
