from typing import Protocol, runtime_checkable

from opponent_scout.domain.player import ListedPlayer, PlayerUpdate


@runtime_checkable
class StatsSource(Protocol):
    @property
    def name(self) -> str: ...

    def fetch(self, player: ListedPlayer) -> PlayerUpdate: ...
