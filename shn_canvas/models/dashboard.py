"""Dashboard block embedded as JSON in rendered turns.

Keys are single letters to keep model output short:
``i`` icon, ``t`` title, ``d`` items, ``k``/``v`` key/value, ``p`` percent.
"""

from pydantic import BaseModel, Field


class DashboardItem(BaseModel):
    """Single key/value indicator."""

    k: str
    v: str | int | float = ""


class DashboardSection(BaseModel):
    """Named group of indicators."""

    i: str = ""
    t: str = ""
    d: list[DashboardItem] = Field(default_factory=list)


class DashboardEvent(BaseModel):
    """Ongoing event with a progress bar."""

    i: str = ""
    t: str = ""
    p: float = Field(0, ge=0, le=100)


class Dashboard(BaseModel):
    """Status dashboard payload."""

    core: list[DashboardSection] | None = None
    event: DashboardEvent | None = None
