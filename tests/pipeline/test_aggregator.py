import itertools
import random
from typing import Any

import httpx
import pytest

from opponent_scout.cli.factory import build_pipeline
from opponent_scout.config import ScoutConfig, create_config, load_scout_config
from opponent_scout.discovery.players import PlayerLister
from opponent_scout.discovery.roster import RosterDiscoverer
from opponent_scout.domain.player import (
    NO_ESPORTAL_PROFILE,
    EsportalStats,
    FaceitStats,
    ListedPlayer,
    Opponent,
    PlayerUpdate,
)
from opponent_scout.domain.rank import Rank
from opponent_scout.domain.result import Ok
from opponent_scout.exceptions import ChallengeNotBypassedError, ExtractionError
from opponent_scout.pipeline.aggregator import AggregationPipeline
from opponent_scout.player_id.steam import INDIVIDUAL_BASE
from opponent_scout.scraping.pacing import PacingPolicy
from tests.fakes.pages import (
    CHALLENGE_PAGE,
    FACEIT_NOT_FOUND_PAGE,
    csgostats_page,
    faceit_page,
    roster_page,
    schedule_page,
)
from tests.fakes.renderers import FakeRenderer, RecordingSleeper
from tests.fakes.transports import RoutingTransport, esportal_transport

SCHEDULE_URL = "https://www.toornament.com/en_GB/tournaments/1/participants/2/matches"
BETA_ROSTER = "https://www.toornament.com/en_GB/tournaments/1/matches/100/players"
GAMMA_ROSTER = "https://www.toornament.com/en_GB/tournaments/1/matches/300/players"


def _steam(account_id: int) -> str:
    return str(INDIVIDUAL_BASE + account_id)


B1, B2, B3 = _steam(11), _steam(12), _steam(13)
G1, G2 = _steam(21), _steam(22)

SCHEDULE = schedule_page(
    "Alpha",
    [
        ("Alpha", "Beta", "/en_GB/tournaments/1/matches/100/"),
        ("Gamma", "Alpha", "/en_GB/tournaments/1/matches/300/"),
        ("Beta", "Alpha", "/en_GB/tournaments/1/matches/400/"),
    ],
)

ALPHA_PLAYERS = [("own1", _steam(1)), ("own2", _steam(2))]


def _pages(**overrides: Any) -> dict[str, Any]:
    pages: dict[str, Any] = {
        SCHEDULE_URL: SCHEDULE,
        BETA_ROSTER: roster_page([("Alpha", ALPHA_PLAYERS), ("Beta", [("b1", B1), ("b2", B2), ("b3", B3)])]),
        GAMMA_ROSTER: roster_page([("Gamma", [("g1", G1), ("g2", G2)]), ("Alpha", ALPHA_PLAYERS)]),
        f"https://csgostats.gg/player/{B1}": csgostats_page(7, 9),
        f"https://csgostats.gg/player/{B2}": csgostats_page(15, 16),
        f"https://csgostats.gg/player/{B3}": csgostats_page(7),
        f"https://csgostats.gg/player/{G1}": csgostats_page(),
        f"https://csgostats.gg/player/{G2}": [CHALLENGE_PAGE, csgostats_page(18, 18)],
        f"https://faceitfinder.com/stats/{B1}": faceit_page("1234", 5, "1500 (6)"),
        f"https://faceitfinder.com/stats/{B2}": FACEIT_NOT_FOUND_PAGE,
        f"https://faceitfinder.com/stats/{B3}": FACEIT_NOT_FOUND_PAGE,
        f"https://faceitfinder.com/stats/{G1}": FACEIT_NOT_FOUND_PAGE,
        f"https://faceitfinder.com/stats/{G2}": faceit_page("2800", 10, "3001 (10)"),
    }
    pages.update(overrides)
    return pages


def _esportal() -> RoutingTransport:
    return esportal_transport(
        {11: [{"username": "b_one"}], 21: [{"username": "g_one"}]},
        {"b_one": 1999, "g_one": 2000},
    )


def _config(**overrides: Any) -> ScoutConfig:
    result = load_scout_config(SCHEDULE_URL, create_config(overrides=overrides or None))
    assert isinstance(result, Ok)
    return result.value


class RecordingReporter:
    def __init__(self) -> None:
        self.recorded: list[tuple[str, Opponent]] = []

    def record_opponent(self, name: str, opponent: Opponent) -> None:
        self.recorded.append((name, opponent))


class _Harness:
    def __init__(self, pages: dict[str, Any], config: ScoutConfig | None = None) -> None:
        self.renderer = FakeRenderer(pages)
        self.transport = _esportal()
        self.sleeper = RecordingSleeper()
        self.reporter = RecordingReporter()
        self.agent_counter = itertools.count()
        self.pipeline = build_pipeline(
            config or _config(),
            self.renderer,
            httpx.Client(transport=self.transport),
            self.reporter,
            rng=random.Random(1234),
            sleep=self.sleeper,
            identities=lambda: f"agent-{next(self.agent_counter)}",
        )


class TestAggregationPipelineEndToEnd:
    def test_opponent_keys_exclude_own_team(self) -> None:
        result = _Harness(_pages()).pipeline.run(SCHEDULE_URL)

        assert list(result) == ["Beta", "Gamma"]
        assert "Alpha" not in result
        assert all(opponent.players for opponent in result.values())
        assert result["Beta"].roster_url == BETA_ROSTER

    def test_players_sorted_by_current_rank_stably(self) -> None:
        result = _Harness(_pages()).pipeline.run(SCHEDULE_URL)

        beta = result["Beta"].players
        assert [p.name for p in beta] == ["b2", "b1", "b3"]
        values = [p.current_rank_value for p in beta]
        assert values == sorted(values, reverse=True)
        assert [p.name for p in result["Gamma"].players] == ["g2", "g1"]

    def test_missing_rank_images_are_unranked(self) -> None:
        result = _Harness(_pages()).pipeline.run(SCHEDULE_URL)

        g1 = next(p for p in result["Gamma"].players if p.name == "g1")
        assert g1.current_rank == Rank(0, "N/A")
        assert g1.best_rank == Rank(0, "N/A")

    def test_missing_label_configuration(self) -> None:
        harness = _Harness(_pages(), _config(ranks={"unranked_label": "Missing"}))
        result = harness.pipeline.run(SCHEDULE_URL)

        g1 = next(p for p in result["Gamma"].players if p.name == "g1")
        assert g1.current_rank == Rank(0, "Missing")

    def test_sources_merged_into_player(self) -> None:
        result = _Harness(_pages()).pipeline.run(SCHEDULE_URL)

        b1 = next(p for p in result["Beta"].players if p.name == "b1")
        assert b1.platform_id == B1
        assert b1.current_rank == Rank(7, "GN1")
        assert b1.best_rank == Rank(9, "GN3")
        assert b1.faceit == FaceitStats(current="1234 (5)", highest="1500 (6)")
        assert b1.esportal == EsportalStats(elo=1999, tier="Pro II")

        b3 = next(p for p in result["Beta"].players if p.name == "b3")
        assert b3.best_rank == Rank(7, "GN1")

    def test_no_esportal_profile_is_sentinel(self) -> None:
        result = _Harness(_pages()).pipeline.run(SCHEDULE_URL)

        b2 = next(p for p in result["Beta"].players if p.name == "b2")
        assert b2.esportal is NO_ESPORTAL_PROFILE
        assert b2.faceit == FaceitStats()

    def test_every_player_attempts_every_source_once(self) -> None:
        harness = _Harness(_pages())
        harness.pipeline.run(SCHEDULE_URL)

        urls = harness.renderer.urls()
        for steam_id in (B1, B2, B3, G1):
            assert urls.count(f"https://csgostats.gg/player/{steam_id}") == 1
        # G2 hit the challenge page once before getting through.
        assert urls.count(f"https://csgostats.gg/player/{G2}") == 2
        for steam_id in (B1, B2, B3, G1, G2):
            assert urls.count(f"https://faceitfinder.com/stats/{steam_id}") == 1
        searched = [int(r.url.params["id"]) for r in harness.transport.requests if r.url.path == "/user_profile/list"]
        assert searched == [11, 12, 13, 21, 22]

    def test_requests_are_sequential_in_discovery_and_listing_order(self) -> None:
        harness = _Harness(_pages())
        harness.pipeline.run(SCHEDULE_URL)

        urls = harness.renderer.urls()
        assert urls[:4] == [
            SCHEDULE_URL,
            BETA_ROSTER,
            f"https://csgostats.gg/player/{B1}",
            f"https://faceitfinder.com/stats/{B1}",
        ]
        assert urls.index(GAMMA_ROSTER) > urls.index(f"https://faceitfinder.com/stats/{B3}")

    def test_pacing_before_every_listing_and_source(self) -> None:
        harness = _Harness(_pages())
        harness.pipeline.run(SCHEDULE_URL)

        opponents, players, sources, challenge_backoffs = 2, 5, 3, 1
        assert len(harness.sleeper.delays) == opponents + players * sources + challenge_backoffs
        assert all(d >= 0 for d in harness.sleeper.delays)

    def test_rank_pages_rendered_with_fresh_user_agents(self) -> None:
        harness = _Harness(_pages())
        harness.pipeline.run(SCHEDULE_URL)

        agents = [c.user_agent for c in harness.renderer.calls if c.url.startswith("https://csgostats.gg/")]
        assert len(agents) == 6
        assert all(agent is not None and agent.startswith("agent-") for agent in agents)
        assert len(set(agents)) == len(agents)

    def test_reporter_records_each_opponent_in_order(self) -> None:
        harness = _Harness(_pages())
        result = harness.pipeline.run(SCHEDULE_URL)

        assert [name for name, _ in harness.reporter.recorded] == ["Beta", "Gamma"]
        assert harness.reporter.recorded[0][1] == result["Beta"]

    def test_challenge_exhaustion_aborts_run(self) -> None:
        harness = _Harness(_pages(**{f"https://csgostats.gg/player/{G2}": CHALLENGE_PAGE}))

        with pytest.raises(ChallengeNotBypassedError):
            harness.pipeline.run(SCHEDULE_URL)
        assert harness.renderer.urls().count(f"https://csgostats.gg/player/{G2}") == 5
        assert [name for name, _ in harness.reporter.recorded] == ["Beta"]

    def test_extraction_error_aborts_run(self) -> None:
        broken = roster_page([("Alpha", ALPHA_PLAYERS)])
        harness = _Harness(_pages(**{BETA_ROSTER: broken}))

        with pytest.raises(ExtractionError):
            harness.pipeline.run(SCHEDULE_URL)
        assert GAMMA_ROSTER not in harness.renderer.urls()
        assert harness.reporter.recorded == []


class _StubSource:
    def __init__(self, name: str, update: PlayerUpdate, calls: list[tuple[str, str]]) -> None:
        self._name = name
        self._update = update
        self._calls = calls

    @property
    def name(self) -> str:
        return self._name

    def fetch(self, player: ListedPlayer) -> PlayerUpdate:
        self._calls.append((self._name, player.platform_id))
        return self._update


class TestAggregationPipelineEnrich:
    def test_sources_queried_in_order(self) -> None:
        calls: list[tuple[str, str]] = []
        sources = [
            _StubSource("ranks", PlayerUpdate(current_rank=Rank(3, "S3")), calls),
            _StubSource("faceit", PlayerUpdate(faceit=FaceitStats()), calls),
            _StubSource("esportal", PlayerUpdate(esportal=NO_ESPORTAL_PROFILE), calls),
        ]
        sleeper = RecordingSleeper()
        pipeline = AggregationPipeline(
            RosterDiscoverer(FakeRenderer({})),
            PlayerLister(FakeRenderer({})),
            sources,
            PacingPolicy(rng=random.Random(0), sleep=sleeper),
        )

        player = pipeline.enrich(ListedPlayer(name="x", platform_id="42"))

        assert calls == [("ranks", "42"), ("faceit", "42"), ("esportal", "42")]
        assert player.current_rank == Rank(3, "S3")
        assert player.esportal is NO_ESPORTAL_PROFILE
        assert len(sleeper.delays) == 3
