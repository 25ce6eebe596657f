"""Schemas shared by the service layer."""

from pydantic import BaseModel


class Notice(BaseModel):
    """Pydantic model representing a notice from the university notice board."""

    id: int
    title: str
    url: str
    category: str | None = None
    department: str | None = None
    content: str | None = None
    date: str | None = None
