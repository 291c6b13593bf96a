"""Sequential scouting pipeline.

Discovery, listing and enrichment run one request at a time: opponents in
discovery order, players in listing order, and for each player the sources
in the order they were given. Any exception aborts the whole run.
"""

import logging
from collections.abc import Sequence
from typing import Protocol

from opponent_scout.discovery.players import PlayerLister
from opponent_scout.discovery.roster import RosterDiscoverer
from opponent_scout.domain.player import (
    AggregationResult,
    ListedPlayer,
    Opponent,
    Player,
    PlayerBuilder,
    sort_by_current_rank,
)
from opponent_scout.scraping.pacing import PacingPolicy
from opponent_scout.sources.protocols import StatsSource

logger = logging.getLogger(__name__)


class Reporter(Protocol):
    def record_opponent(self, name: str, opponent: Opponent) -> None: ...


class NullReporter:
    def record_opponent(self, name: str, opponent: Opponent) -> None:
        pass


class AggregationPipeline:
    def __init__(
        self,
        discoverer: RosterDiscoverer,
        lister: PlayerLister,
        sources: Sequence[StatsSource],
        pacing: PacingPolicy,
        reporter: Reporter | None = None,
    ) -> None:
        self._discoverer = discoverer
        self._lister = lister
        self._sources = tuple(sources)
        self._pacing = pacing
        self._reporter = reporter or NullReporter()

    def enrich(self, listed: ListedPlayer) -> Player:
        builder = PlayerBuilder(listed)
        for index, source in enumerate(self._sources):
            self._pacing.before_source(source.name, listed.platform_id, first=index == 0)
            builder.apply(source.name, source.fetch(listed))
        return builder.build()

    def scout_opponent(self, name: str, opponent: Opponent, own_team: str) -> Opponent:
        self._pacing.before_opponent(name)
        listed_players = self._lister.list_players(opponent.roster_url, own_team)
        logger.info("Scouting %s (%d players)", name, len(listed_players))

        players: list[Player] = []
        for listed in listed_players:
            players.append(self.enrich(listed))
            logger.debug("Enriched %s (%s)", listed.name, listed.platform_id)

        return Opponent(roster_url=opponent.roster_url, players=tuple(sort_by_current_rank(players)))

    def run(self, schedule_url: str) -> AggregationResult:
        discovery = self._discoverer.discover(schedule_url)

        result: AggregationResult = {}
        for name, opponent in discovery.opponents.items():
            scouted = self.scout_opponent(name, opponent, discovery.own_team)
            result[name] = scouted
            self._reporter.record_opponent(name, scouted)

        logger.info(
            "Scouted %d opponents, %d players",
            len(result),
            sum(len(o.players) for o in result.values()),
        )
        return result
