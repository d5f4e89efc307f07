"""Static level and game definitions supplied by the content layer."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace

from backend.models.errors import ConfigurationError
from backend.models.items import LabelSpec
from backend.models.rules import GameRules


@dataclass(frozen=True)
class KnowledgeCard:
    tip: str
    source: str = ""


@dataclass(frozen=True)
class Level:
    """One level of a mini-game.

    ``target_sequence`` lists the keys that must be found; each entry
    becomes its own placed item, so a repeated key means a repeated
    item.  Pool entries whose key is not in the sequence are treated as
    distractors.
    """

    id: int | str
    item_pool: tuple[LabelSpec, ...]
    target_sequence: tuple[str, ...]
    hint: str = ""
    distractors: tuple[LabelSpec, ...] = ()
    title: str = ""
    card: KnowledgeCard | None = None

    @classmethod
    def from_phrase(
        cls,
        id: int | str,
        phrase: str,
        distractors: Iterable[str],
        *,
        hint: str = "",
        card: KnowledgeCard | None = None,
    ) -> Level:
        """Build a hidden-phrase level where every glyph is a target.

        Example::

            Level.from_phrase(1, "領事保護", ["旅遊", "購物"])
        """
        glyphs = tuple(phrase)
        return cls(
            id=id,
            item_pool=tuple(LabelSpec(g) for g in dict.fromkeys(glyphs)),
            target_sequence=glyphs,
            hint=hint,
            distractors=tuple(LabelSpec(d) for d in distractors),
            title=phrase,
            card=card,
        )

    # -- queries --------------------------------------------------------------

    @property
    def target_count(self) -> int:
        return len(self.target_sequence)

    def targets(self) -> list[LabelSpec]:
        by_key = {spec.key: spec for spec in self.item_pool}
        return [replace(by_key[key], is_target=True) for key in self.target_sequence]

    def distractor_specs(self) -> list[LabelSpec]:
        wanted = set(self.target_sequence)
        spare = [s for s in self.item_pool if s.key not in wanted]
        return [replace(s, is_target=False) for s in (*spare, *self.distractors)]

    def validate(self) -> None:
        if not self.item_pool:
            raise ConfigurationError(f"Level {self.id!r} has an empty item pool.")
        if not self.target_sequence:
            raise ConfigurationError(f"Level {self.id!r} has no targets.")
        pool_keys = {spec.key for spec in self.item_pool}
        missing = [k for k in self.target_sequence if k not in pool_keys]
        if missing:
            raise ConfigurationError(
                f"Level {self.id!r} targets {missing} which are not in its item pool."
            )


@dataclass(frozen=True)
class RegionSpec:
    """A drop target a game asks its frontend to lay out."""

    key: str
    title: str
    tone: str = "neutral"


@dataclass(frozen=True)
class GameDefinition:
    """Everything needed to run one mini-game."""

    name: str
    title: str
    rules: GameRules
    levels: tuple[Level, ...]
    regions: tuple[RegionSpec, ...]
    classification: Mapping[str, str] = field(default_factory=dict)
    explanations: Mapping[str, str] = field(default_factory=dict)
    description: str = ""

    def validate(self) -> None:
        if not self.levels:
            raise ConfigurationError(f"Game {self.name!r} has no levels.")
        if not self.regions:
            raise ConfigurationError(f"Game {self.name!r} has no drop regions.")
        self.rules.validate()
        for level in self.levels:
            level.validate()
