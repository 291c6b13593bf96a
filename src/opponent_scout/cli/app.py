import logging
from typing import Annotated

import httpx
import typer
from playwright.sync_api import Error as PlaywrightError

from opponent_scout.cli._logging import configure_logging
from opponent_scout.cli._output import print_error, result_to_json
from opponent_scout.cli.factory import build_scout_context
from opponent_scout.config import ScoutConfig, load_scout_config
from opponent_scout.domain.result import Err, Ok
from opponent_scout.exceptions import ScoutException

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="opponent-scout",
    help="Scout a team's tournament opponents and their players' ranks.",
    add_completion=False,
    pretty_exceptions_enable=False,
)


@app.command()
def scout(
    schedule_url: Annotated[str, typer.Argument(help="URL of the team's matches page on toornament.com")],
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable DEBUG logging")] = False,
) -> None:
    """Print opponent rosters as JSON on stdout and as tables on stderr."""
    configure_logging(verbose=verbose)

    match load_scout_config(schedule_url):
        case Ok(config):
            _run_scout(config)
        case Err(e):
            print_error(e.message)
            raise typer.Exit(code=1)


def _run_scout(config: ScoutConfig) -> None:
    try:
        with build_scout_context(config) as ctx:
            result = ctx.pipeline.run(config.schedule_url)
    except (ScoutException, httpx.HTTPError, PlaywrightError) as e:
        logger.debug("Scouting run failed", exc_info=True)
        print_error(str(e))
        raise typer.Exit(code=1) from e

    ctx.reporter.flush()
    typer.echo(result_to_json(result))


def main() -> None:
    app()
