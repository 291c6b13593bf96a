"""Matchmaking rank tiers reported by the primary ranking source."""

from collections.abc import Mapping
from dataclasses import dataclass

UNRANKED = 0
MAX_RANK = 18

# Older exports of the rank table used "Missing" for unranked players.
UNRANKED_LABELS: tuple[str, ...] = ("N/A", "Missing")

_RANKED_LABELS: dict[int, str] = {
    1: "S1",
    2: "S2",
    3: "S3",
    4: "S4",
    5: "SE",
    6: "SEM",
    7: "GN1",
    8: "GN2",
    9: "GN3",
    10: "GNM",
    11: "MG1",
    12: "MG2",
    13: "MGE",
    14: "DMG",
    15: "LE",
    16: "LEM",
    17: "SMFC",
    18: "GE",
}


@dataclass(frozen=True)
class Rank:
    value: int
    label: str


class RankTable:
    """Maps rank values in ``[0, 18]`` to display labels.

    Value 0 means the player is unranked or the rank could not be found; its
    label is configurable because the source has published two variants.
    """

    def __init__(self, unranked_label: str = UNRANKED_LABELS[0]) -> None:
        if unranked_label not in UNRANKED_LABELS:
            raise ValueError(f"Unknown unranked label {unranked_label!r}, expected one of {UNRANKED_LABELS}")
        self._labels: dict[int, str] = {UNRANKED: unranked_label, **_RANKED_LABELS}

    @property
    def labels(self) -> Mapping[int, str]:
        return dict(self._labels)

    @property
    def unranked_label(self) -> str:
        return self._labels[UNRANKED]

    def __contains__(self, value: object) -> bool:
        return value in self._labels

    def label(self, value: int) -> str:
        """Return the label for *value*; raises ``KeyError`` outside the table."""
        return self._labels[value]

    def rank(self, value: int) -> Rank:
        return Rank(value=value, label=self.label(value))
