"""Built-in games must load and pack cleanly."""

from __future__ import annotations

import random

import pytest

from backend.content import GAMES
from backend.engine.clock import Scheduler
from backend.engine.gameplay import GamePlay
from backend.models.level import GameDefinition


@pytest.mark.parametrize("game", list(GAMES.values()), ids=list(GAMES))
def test_game_definitions_validate(game: GameDefinition) -> None:
    game.validate()
    for level in game.levels:
        assert level.targets()
        assert all(game.classification.get(k) for k in level.target_sequence)


@pytest.mark.parametrize("game", list(GAMES.values()), ids=list(GAMES))
@pytest.mark.parametrize("seed", range(3))
def test_every_level_packs(game: GameDefinition, seed: int) -> None:
    play = GamePlay(game, rng=random.Random(seed), scheduler=Scheduler())
    play.start()
    for index in range(len(game.levels)):
        assert play.session.level_index == index
        placed = sorted(i.key for i in play.items if i.is_target)
        assert placed == sorted(game.levels[index].target_sequence)
        play.restart(index + 1)
        play.start()


def test_cloud_distractors_never_match() -> None:
    cloud = GAMES["cloud"]
    play = GamePlay(cloud)
    for level in cloud.levels:
        for spec in level.distractor_specs():
            assert not play.validator.validate(spec.key, "archive").correct
