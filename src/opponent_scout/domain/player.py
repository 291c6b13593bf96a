from dataclasses import dataclass, replace
from typing import Final, final

from opponent_scout.domain.rank import Rank


@dataclass(frozen=True)
class ListedPlayer:
    """A player as listed on an opponent's roster page, before enrichment."""

    name: str
    platform_id: str


@dataclass(frozen=True)
class FaceitStats:
    """Pre-formatted FACEIT display values.

    Attributes:
        current: Current Elo and skill level, e.g. ``"1234 (5)"``.
        highest: Highest Elo as presented by the source.
    """

    current: str | None = None
    highest: str | None = None

    @property
    def found(self) -> bool:
        return self.current is not None or self.highest is not None


@dataclass(frozen=True)
class EsportalStats:
    elo: int
    tier: str

    @property
    def display(self) -> str:
        return f"{self.elo} ({self.tier})"


@final
class NoEsportalProfile:
    """Sentinel type for a player without an Esportal profile."""

    _instance: "NoEsportalProfile | None" = None

    def __new__(cls) -> "NoEsportalProfile":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NO_ESPORTAL_PROFILE"

    def __bool__(self) -> bool:
        return False


NO_ESPORTAL_PROFILE: Final = NoEsportalProfile()

type EsportalResult = EsportalStats | NoEsportalProfile


@dataclass(frozen=True)
class PlayerUpdate:
    """Fields contributed by a single statistics source.

    Sources write disjoint fields; ``None`` means "not contributed by this
    source", not "absent on the source".
    """

    current_rank: Rank | None = None
    best_rank: Rank | None = None
    faceit: FaceitStats | None = None
    esportal: EsportalResult | None = None


@dataclass(frozen=True)
class Player:
    name: str
    platform_id: str
    current_rank: Rank | None = None
    best_rank: Rank | None = None
    faceit: FaceitStats | None = None
    esportal: EsportalResult | None = None

    @property
    def current_rank_value(self) -> int:
        return self.current_rank.value if self.current_rank is not None else 0


class PlayerBuilder:
    """Accumulates partial updates for one listed player into a ``Player``."""

    def __init__(self, listed: ListedPlayer) -> None:
        self._player = Player(name=listed.name, platform_id=listed.platform_id)
        self._applied: list[str] = []

    @property
    def applied_sources(self) -> tuple[str, ...]:
        return tuple(self._applied)

    def apply(self, source: str, update: PlayerUpdate) -> "PlayerBuilder":
        changes = {
            field: value
            for field, value in (
                ("current_rank", update.current_rank),
                ("best_rank", update.best_rank),
                ("faceit", update.faceit),
                ("esportal", update.esportal),
            )
            if value is not None
        }
        self._player = replace(self._player, **changes)
        self._applied.append(source)
        return self

    def build(self) -> Player:
        return self._player


@dataclass(frozen=True)
class Opponent:
    roster_url: str
    players: tuple[Player, ...] = ()


type AggregationResult = dict[str, Opponent]


def sort_by_current_rank(players: list[Player]) -> list[Player]:
    """Order players by current rank, highest first; ties keep listing order."""
    return sorted(players, key=lambda p: p.current_rank_value, reverse=True)
