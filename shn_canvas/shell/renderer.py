"""Shell renderer: injects turn markup into a styled page.

The markup is injected verbatim (no sanitization). After rendering, an
embedded dashboard JSON block, if any, is expanded into its target element.
"""

import asyncio
import json
import logging

from bs4 import BeautifulSoup, Tag
from pydantic import ValidationError

from shn_canvas.models.dashboard import Dashboard
from shn_canvas.shell.recorder import TurnRecorder
from shn_canvas.shell.styles import DEFAULT_HOST_PAGE, SHELL_STYLESHEET

logger = logging.getLogger(__name__)

LOADER_ID = "initial-loader"
APP_SHELL_ID = "app-shell"
DASHBOARD_DATA_ID = "dashboard-json-data"
DASHBOARD_TARGET_ID = "dashboard-render-target"


def _format_percent(value: float) -> str:
    return f"{value:g}%"


def _section_title(soup: BeautifulSoup, icon: str, title: str) -> Tag:
    title_div = soup.new_tag("div", attrs={"class": "dashboard-section-title"})
    title_div.string = f"{icon} {title}".strip()
    return title_div


def build_dashboard_nodes(soup: BeautifulSoup, dashboard: Dashboard) -> list[Tag]:
    """Build dashboard section elements for a parsed dashboard payload."""
    nodes: list[Tag] = []

    for section in dashboard.core or []:
        section_div = soup.new_tag("div", attrs={"class": "dashboard-section"})
        section_div.append(_section_title(soup, section.i, section.t))
        items_div = soup.new_tag("div", attrs={"class": "dashboard-items"})
        for item in section.d:
            item_div = soup.new_tag("div", attrs={"class": "dashboard-item"})
            key_span = soup.new_tag("span", attrs={"class": "key"})
            key_span.string = f"{item.k}:"
            value_span = soup.new_tag("span", attrs={"class": "value"})
            value_span.string = str(item.v)
            item_div.append(key_span)
            item_div.append(value_span)
            items_div.append(item_div)
        section_div.append(items_div)
        nodes.append(section_div)

    if dashboard.event:
        event = dashboard.event
        section_div = soup.new_tag("div", attrs={"class": "dashboard-section"})
        section_div.append(_section_title(soup, event.i, event.t))
        bar = soup.new_tag(
            "div",
            attrs={
                "class": "progress-bar",
                "style": "height:6px;background:var(--border);border-radius:3px;overflow:hidden;",
            },
        )
        fill = soup.new_tag(
            "div",
            attrs={"style": f"height:100%;width:{_format_percent(event.p)};background:var(--accent);"},
        )
        bar.append(fill)
        section_div.append(bar)
        nodes.append(section_div)

    return nodes


def render_dashboard(soup: BeautifulSoup) -> bool:
    """Render the embedded dashboard JSON into its target element.

    Args:
        soup: Parsed page

    Returns:
        True if the target was filled, False if either element is absent
        or the payload could not be parsed
    """
    json_block = soup.find(id=DASHBOARD_DATA_ID)
    render_target = soup.find(id=DASHBOARD_TARGET_ID)
    if json_block is None or render_target is None:
        return False

    try:
        dashboard = Dashboard.model_validate(json.loads(json_block.get_text()))
    except (json.JSONDecodeError, ValidationError) as e:
        logger.error(f"Dashboard rendering failed: {e}")
        return False

    render_target.clear()
    for node in build_dashboard_nodes(soup, dashboard):
        render_target.append(node)
    return True


def render_app_shell(markup: str, title: str | None = None, page: str | None = None) -> str:
    """Render turn markup into the host page.

    Args:
        markup: Caller-supplied HTML, injected verbatim
        title: Optional page title (only set when the page has none)
        page: Host page HTML; a minimal page with a loader is used if omitted

    Returns:
        Full page HTML
    """
    soup = BeautifulSoup(page or DEFAULT_HOST_PAGE, "html.parser")

    loader = soup.find(id=LOADER_ID)
    if loader is not None:
        loader.decompose()

    if soup.head is None:
        head = soup.new_tag("head")
        if soup.html is not None:
            soup.html.insert(0, head)
        else:
            soup.insert(0, head)
    style = soup.new_tag("style")
    style.string = SHELL_STYLESHEET
    soup.head.append(style)

    if title and soup.title is not None and not soup.title.get_text(strip=True):
        soup.title.string = title

    app_shell = soup.new_tag("div", attrs={"id": APP_SHELL_ID, "class": "shn-lite-canvas"})
    app_shell.append(BeautifulSoup(markup, "html.parser"))
    body = soup.body if soup.body is not None else soup
    body.append(app_shell)

    render_dashboard(soup)
    return str(soup)


class ShellRenderer:
    """Renders turns and schedules a best-effort save for each one."""

    def __init__(self, recorder: TurnRecorder | None = None) -> None:
        self._recorder = recorder
        self._pending: set[asyncio.Task[None]] = set()

    def render(
        self,
        markup: str,
        title: str | None = None,
        canvas_id: str | None = None,
        page: str | None = None,
    ) -> str:
        """Render the shell and, inside a running loop, schedule the save.

        The save runs in the background; its failures are logged and never
        reach the caller.
        """
        html = render_app_shell(markup, title=title, page=page)
        if self._recorder is not None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                logger.debug("No running event loop; skipping save-on-render")
            else:
                task = loop.create_task(self._recorder.save_canvas_quietly(markup, title, canvas_id))
                self._pending.add(task)
                task.add_done_callback(self._pending.discard)
        return html

    async def drain(self) -> None:
        """Wait for scheduled saves to finish."""
        if self._pending:
            await asyncio.gather(*self._pending)
