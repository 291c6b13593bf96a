import random
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

import httpx

from opponent_scout.cli._output import TableReporter
from opponent_scout.config import ScoutConfig
from opponent_scout.discovery.players import PlayerLister
from opponent_scout.discovery.roster import RosterDiscoverer
from opponent_scout.domain.rank import RankTable
from opponent_scout.pipeline.aggregator import AggregationPipeline, Reporter
from opponent_scout.scraping.challenge import ChallengeEvasionFetcher
from opponent_scout.scraping.identity import IdentityGenerator, user_agent_generator
from opponent_scout.scraping.pacing import PacingPolicy, Sleeper
from opponent_scout.scraping.renderer import PageRenderer, PlaywrightRenderer
from opponent_scout.sources.csgostats import CsgostatsRankSource
from opponent_scout.sources.esportal import EsportalSource
from opponent_scout.sources.faceit import FaceitFinderSource


@dataclass(frozen=True)
class ScoutContext:
    pipeline: AggregationPipeline
    reporter: TableReporter


def build_pipeline(
    config: ScoutConfig,
    renderer: PageRenderer,
    client: httpx.Client,
    reporter: Reporter,
    *,
    rng: random.Random | None = None,
    sleep: Sleeper = time.sleep,
    identities: IdentityGenerator | None = None,
) -> AggregationPipeline:
    """Wire the pipeline from already-open collaborators.

    A single random source drives pacing jitter and backoff jitter, so a
    seeded ``rng`` makes the timing of a run reproducible. User agents come
    from ``identities``, defaulting to non-repeating desktop browser agents.
    """
    rng = rng or random.Random()
    fetcher = ChallengeEvasionFetcher(
        renderer,
        identities=identities or user_agent_generator(),
        rng=rng,
        sleep=sleep,
    )
    sources = (
        CsgostatsRankSource(
            fetcher,
            RankTable(config.unranked_label),
            base_url=config.csgostats_url,
            max_retries=config.max_retries,
        ),
        FaceitFinderSource(renderer, base_url=config.faceit_url),
        EsportalSource(client, base_url=config.esportal_api_url),
    )
    pacing = PacingPolicy(
        opponent_ms=config.opponent_delay_ms,
        player_ms=config.player_delay_ms,
        source_ms=config.source_delay_ms,
        rng=rng,
        sleep=sleep,
    )
    return AggregationPipeline(
        RosterDiscoverer(renderer, base_url=config.tournament_base_url),
        PlayerLister(renderer),
        sources,
        pacing,
        reporter,
    )


@contextmanager
def build_scout_context(config: ScoutConfig) -> Iterator[ScoutContext]:
    """Launch the browser and HTTP client; both are closed when the block exits."""
    reporter = TableReporter()
    timeout = httpx.Timeout(config.http_timeout_s, connect=5.0)
    with (
        PlaywrightRenderer(headless=config.headless, timeout_ms=config.browser_timeout_ms) as renderer,
        httpx.Client(timeout=timeout) as client,
    ):
        yield ScoutContext(pipeline=build_pipeline(config, renderer, client, reporter), reporter=reporter)
