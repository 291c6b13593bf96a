from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from opponent_scout.scraping.renderer import RenderedPage, WaitUntil


@dataclass(frozen=True)
class RenderCall:
    url: str
    user_agent: str | None
    wait_until: WaitUntil


class FakeRenderer:
    """Serves canned HTML per URL.

    A URL mapped to a sequence of documents returns them in order, repeating
    the last one once the sequence runs out.
    """

    def __init__(self, pages: Mapping[str, str | Sequence[str]]) -> None:
        self._pages = dict(pages)
        self._served: dict[str, int] = {}
        self.calls: list[RenderCall] = []

    def render(self, url: str, *, user_agent: str | None = None, wait_until: WaitUntil = "load") -> RenderedPage:
        self.calls.append(RenderCall(url=url, user_agent=user_agent, wait_until=wait_until))
        if url not in self._pages:
            raise AssertionError(f"Unexpected render of {url}")
        entry = self._pages[url]
        if isinstance(entry, str):
            html = entry
        else:
            index = min(self._served.get(url, 0), len(entry) - 1)
            self._served[url] = index + 1
            html = entry[index]
        return RenderedPage(url=url, html=html, user_agent=user_agent)

    def urls(self) -> list[str]:
        return [call.url for call in self.calls]


class RecordingSleeper:
    def __init__(self) -> None:
        self.delays: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
