from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlparse

from config import ConfigurationSet, config_from_dict

from opponent_scout.domain.errors import ConfigError
from opponent_scout.domain.rank import UNRANKED_LABELS
from opponent_scout.domain.result import Err, Ok, Result

_DEFAULTS: dict[str, object] = {
    "urls": {
        "tournament_base": "https://www.toornament.com",
        "csgostats": "https://csgostats.gg/player",
        "faceit": "https://faceitfinder.com/stats",
        "esportal_api": "https://api.esportal.com",
    },
    "pacing": {
        "opponent_ms": 2000,
        "player_ms": 5000,
        "source_ms": 1000,
    },
    "challenge": {
        "max_retries": 5,
    },
    "ranks": {
        "unranked_label": "N/A",
    },
    "browser": {
        "headless": True,
        "timeout_ms": 60000,
    },
    "http": {
        "timeout_s": 10.0,
    },
}


@dataclass(frozen=True)
class ScoutConfig:
    schedule_url: str
    tournament_base_url: str
    csgostats_url: str
    faceit_url: str
    esportal_api_url: str
    opponent_delay_ms: int
    player_delay_ms: int
    source_delay_ms: int
    max_retries: int
    unranked_label: str
    headless: bool
    browser_timeout_ms: int
    http_timeout_s: float


def create_config(
    defaults: dict[str, object] | None = None,
    overrides: dict[str, object] | None = None,
) -> ConfigurationSet:
    """Create a layered configuration.

    Priority (highest to lowest): explicit overrides > defaults dict. The
    scraper reads nothing from files or the environment.
    """
    if defaults is None:
        defaults = _DEFAULTS

    layers = [config_from_dict(defaults)]
    if overrides:
        layers.insert(0, config_from_dict(overrides))
    return ConfigurationSet(*layers)


def _is_http_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def load_scout_config(
    schedule_url: str,
    cfg: ConfigurationSet | None = None,
) -> Result[ScoutConfig, ConfigError]:
    if cfg is None:
        cfg = create_config()

    if not _is_http_url(schedule_url):
        return Err(ConfigError(message=f"'{schedule_url}' is not an absolute http(s) URL", key="schedule_url"))

    unranked_label = str(cfg["ranks.unranked_label"])
    if unranked_label not in UNRANKED_LABELS:
        return Err(
            ConfigError(
                message=f"ranks.unranked_label must be one of {', '.join(UNRANKED_LABELS)}, got '{unranked_label}'",
                key="ranks.unranked_label",
            )
        )

    max_retries = int(str(cfg["challenge.max_retries"]))
    if max_retries < 1:
        return Err(ConfigError(message="challenge.max_retries must be at least 1", key="challenge.max_retries"))

    delays = {key: int(str(cfg[f"pacing.{key}"])) for key in ("opponent_ms", "player_ms", "source_ms")}
    for key, value in delays.items():
        if value < 0:
            return Err(ConfigError(message=f"pacing.{key} must not be negative", key=f"pacing.{key}"))

    return Ok(
        ScoutConfig(
            schedule_url=schedule_url,
            tournament_base_url=str(cfg["urls.tournament_base"]).rstrip("/"),
            csgostats_url=str(cfg["urls.csgostats"]).rstrip("/"),
            faceit_url=str(cfg["urls.faceit"]).rstrip("/"),
            esportal_api_url=str(cfg["urls.esportal_api"]).rstrip("/"),
            opponent_delay_ms=delays["opponent_ms"],
            player_delay_ms=delays["player_ms"],
            source_delay_ms=delays["source_ms"],
            max_retries=max_retries,
            unranked_label=unranked_label,
            headless=bool(cfg["browser.headless"]),
            browser_timeout_ms=int(str(cfg["browser.timeout_ms"])),
            http_timeout_s=float(str(cfg["http.timeout_s"])),
        )
    )
