import json
from typing import Any

from rich.console import Console, RenderableType
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from opponent_scout.domain.player import (
    AggregationResult,
    EsportalResult,
    EsportalStats,
    FaceitStats,
    Opponent,
    Player,
)
from opponent_scout.domain.rank import Rank

err_console = Console(stderr=True, highlight=False)

_NOT_AVAILABLE = "N/A"


def print_error(message: str) -> None:
    err_console.print(f"[red bold]Error:[/red bold] {escape(message)}", soft_wrap=True)


def _rank_to_dict(rank: Rank | None) -> dict[str, Any] | None:
    if rank is None:
        return None
    return {"value": rank.value, "name": rank.label}


def _faceit_to_dict(stats: FaceitStats | None) -> dict[str, str] | None:
    if stats is None:
        return None
    return {key: value for key, value in (("current", stats.current), ("highest", stats.highest)) if value is not None}


def _esportal_to_dict(result: EsportalResult | None) -> dict[str, Any] | None:
    if isinstance(result, EsportalStats):
        return {"elo": result.elo, "rank": result.tier}
    return None


def player_to_dict(player: Player) -> dict[str, Any]:
    return {
        "name": player.name,
        "steamId": player.platform_id,
        "currentRank": _rank_to_dict(player.current_rank),
        "bestRank": _rank_to_dict(player.best_rank),
        "faceitElo": _faceit_to_dict(player.faceit),
        "esportalElo": _esportal_to_dict(player.esportal),
    }


def result_to_dict(result: AggregationResult) -> dict[str, Any]:
    return {
        name: {
            "players": [player_to_dict(p) for p in opponent.players],
            "matchUrl": opponent.roster_url,
        }
        for name, opponent in result.items()
    }


def result_to_json(result: AggregationResult) -> str:
    return json.dumps(result_to_dict(result), ensure_ascii=False)


def _esportal_display(result: EsportalResult | None) -> str:
    if isinstance(result, EsportalStats):
        return result.display
    return _NOT_AVAILABLE


def opponent_table(opponent: Opponent) -> Table:
    table = Table(show_edge=False, pad_edge=False)
    table.add_column("Name", style="bold")
    table.add_column("ID")
    table.add_column("Current Rank")
    table.add_column("Best Rank")
    table.add_column("Current FACEIT Elo", justify="right")
    table.add_column("Highest FACEIT Elo", justify="right")
    table.add_column("Current Esportal Elo", justify="right")
    for p in opponent.players:
        faceit = p.faceit or FaceitStats()
        # Player names come from user input; never interpret them as markup.
        table.add_row(
            Text(p.name),
            p.platform_id,
            p.current_rank.label if p.current_rank else _NOT_AVAILABLE,
            p.best_rank.label if p.best_rank else _NOT_AVAILABLE,
            faceit.current or _NOT_AVAILABLE,
            faceit.highest or _NOT_AVAILABLE,
            _esportal_display(p.esportal),
        )
    return table


class TableReporter:
    """Collects one table per opponent and prints them on ``flush``.

    Nothing is written until the run has succeeded, so a failed run leaves
    only the error message on stderr.
    """

    def __init__(self, target: Console | None = None) -> None:
        self._console = target or err_console
        self._pending: list[RenderableType] = []

    def record_opponent(self, name: str, opponent: Opponent) -> None:
        self._pending.append(Text(f"{name}:", style="bold"))
        self._pending.append(opponent_table(opponent))

    def flush(self) -> None:
        for renderable in self._pending:
            self._console.print(renderable)
        self._pending.clear()
