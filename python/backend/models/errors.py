"""Error taxonomy for the engine.

Only developer-facing problems are exceptions.  Bad drops, drags on
resolved items and events that do not apply in the current state are
normal gameplay and are ignored instead.
"""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Level data or rules that can never produce a playable level."""


class PlacementError(RuntimeError):
    """The packer could not place every target even after re-packing."""

    def __init__(self, level_id: object, missing: list[str]) -> None:
        self.level_id = level_id
        self.missing = missing
        super().__init__(
            f"Level {level_id!r}: could not place target(s) "
            f"{', '.join(missing)} after re-packing."
        )
