"""HTML → structured-text (turn log) converter.

Walks rendered turn markup and re-serializes the recognized sections into
the flat ``## [턴 N]`` schema consumed by the extraction prompt. Lossy:
anything outside the known section types is dropped.
"""

from bs4 import BeautifulSoup, Tag

TURN_HEADING = "## [턴 {turn}]"
STATUS_HEADING = "### 상태 정보"
CHOICES_HEADING = "### 제시된 선택지"
MAIN_TITLE_PREFIX = "### @mainTitle: "
MAIN_SUBTITLE_PREFIX = "### @mainSubtitle: "


def _text(node: Tag) -> str:
    return node.get_text().strip()


def _header_block(header: Tag) -> str:
    out = ""
    main_title = header.find("h1")
    subtitle = header.select_one(".subtitle")
    if main_title is not None:
        out += f"{MAIN_TITLE_PREFIX}{_text(main_title)}\n"
    if subtitle is not None:
        out += f"{MAIN_SUBTITLE_PREFIX}{_text(subtitle)}\n"
    return out + "\n"


def _paragraphs(section: Tag) -> str:
    return "".join(f"{_text(p)}\n\n" for p in section.find_all("p"))


def _blockquote(section: Tag) -> str:
    blockquote = section.find("blockquote")
    if blockquote is None:
        return ""
    lines = _text(blockquote).split("\n")
    return "\n".join(f"> {line.strip()}" for line in lines) + "\n\n"


def _heading(section: Tag) -> str:
    h2 = section.find("h2")
    if h2 is None:
        return ""
    return f"## {_text(h2)}\n\n"


def _status_dashboard(section: Tag) -> str:
    out = f"{STATUS_HEADING}\n\n"
    for dashboard_section in section.select(".dashboard-section"):
        title = dashboard_section.select_one(".dashboard-section-title")
        items = dashboard_section.select(".dashboard-item")
        if title is None or not items:
            continue
        out += f"**{_text(title)}**\n"
        for item in items:
            key = item.select_one(".key")
            value = item.select_one(".value")
            if key is not None and value is not None:
                out += f"- **{_text(key)}:** {_text(value)}\n"
        out += "\n"
    return out + "---\n\n"


def _ordered_list(section: Tag) -> str:
    out = f"{CHOICES_HEADING}\n\n"
    for idx, item in enumerate(section.find_all("li"), start=1):
        out += f"{idx}. {_text(item)}\n"
    return out + "\n"


# Checked in order; the first matching class wins
SECTION_RENDERERS = (
    ("type-paragraph", _paragraphs),
    ("type-blockquote", _blockquote),
    ("type-heading-h2", _heading),
    ("type-status-dashboard", _status_dashboard),
    ("type-ordered-list", _ordered_list),
)


def convert_html_to_turn_log(html: str, turn: int) -> str:
    """Convert one turn's markup into its structured-text block.

    Args:
        html: Rendered markup for the turn
        turn: Turn number used in the heading

    Returns:
        Text block starting with the ``## [턴 N]`` heading
    """
    soup = BeautifulSoup(html, "html.parser")
    out = f"\n\n{TURN_HEADING.format(turn=turn)}\n\n"

    header = soup.select_one(".header")
    if header is not None:
        out += _header_block(header)

    for section in soup.select(".content-section"):
        classes = section.get("class") or []
        for class_name, render in SECTION_RENDERERS:
            if class_name in classes:
                out += render(section)
                break

    return out
