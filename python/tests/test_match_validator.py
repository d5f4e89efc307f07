"""MatchValidator tests."""

from __future__ import annotations

import pytest

from backend.engine.matchvalidator import MatchValidator, Verdict


def test_identity_match() -> None:
    v = MatchValidator(score_per_match=10)
    assert v.validate("領", "領") == Verdict(True, 10)


def test_identity_mismatch_scores_nothing() -> None:
    v = MatchValidator()
    verdict = v.validate("領", "護")
    assert not verdict.correct
    assert verdict.score_delta == 0


@pytest.mark.parametrize(
    "item, region, expected",
    [
        ("mail-01", "red", True),
        ("mail-06", "yellow", True),
        ("mail-06", "red", False),
        ("mail-11", "blue", True),
        ("unknown", "blue", False),
    ],
)
def test_classification(item: str, region: str, expected: bool) -> None:
    v = MatchValidator(
        {"mail-01": "red", "mail-06": "yellow", "mail-11": "blue"},
    )
    assert v.validate(item, region).correct is expected


def test_explanation_only_on_mismatch() -> None:
    v = MatchValidator(
        {"mail-06": "yellow"},
        explanations={"mail-06": "Commercial disputes go to local police."},
    )
    assert v.validate("mail-06", "yellow").explanation is None
    assert v.validate("mail-06", "red").explanation == "Commercial disputes go to local police."


def test_validate_is_idempotent() -> None:
    v = MatchValidator({"a": "x"}, score_per_match=5)
    first = v.validate("a", "x")
    assert all(v.validate("a", "x") == first for _ in range(5))


def test_tables_are_copied() -> None:
    table = {"a": "x"}
    v = MatchValidator(table)
    table["a"] = "y"
    assert v.classify("a") == "x"
    assert v.classify("b") == "b"
