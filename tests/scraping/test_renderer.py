import pytest

from opponent_scout.scraping.renderer import PageRenderer, PlaywrightRenderer, RenderedPage, has_element
from tests.fakes.renderers import FakeRenderer

HTML = """
<html><body>
  <div id="player-name">someone</div>
  <ul><li class="item">a</li><li class="item">b</li></ul>
</body></html>
"""


class TestRenderedPage:
    def test_select_one(self) -> None:
        page = RenderedPage(url="https://example.com", html=HTML)
        element = page.select_one("#player-name")
        assert element is not None
        assert element.get_text() == "someone"

    def test_select(self) -> None:
        page = RenderedPage(url="https://example.com", html=HTML)
        assert [li.get_text() for li in page.select("li.item")] == ["a", "b"]

    def test_has(self) -> None:
        page = RenderedPage(url="https://example.com", html=HTML)
        assert page.has("#player-name")
        assert not page.has("#challenge-stage")

    def test_equality_ignores_user_agent(self) -> None:
        a = RenderedPage(url="u", html=HTML, user_agent="one")
        b = RenderedPage(url="u", html=HTML, user_agent="two")
        assert a == b


class TestHasElement:
    def test_predicate(self) -> None:
        predicate = has_element("#player-name")
        assert predicate(RenderedPage(url="u", html=HTML))
        assert not predicate(RenderedPage(url="u", html="<html></html>"))


class TestPlaywrightRenderer:
    def test_satisfies_renderer_protocol(self) -> None:
        assert isinstance(PlaywrightRenderer(), PageRenderer)

    def test_render_outside_context_raises(self) -> None:
        with pytest.raises(RuntimeError, match="context manager"):
            PlaywrightRenderer().render("https://example.com")


def test_fake_renderer_satisfies_protocol() -> None:
    assert isinstance(FakeRenderer({}), PageRenderer)
