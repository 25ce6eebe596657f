"""Schemas for the telegram bot."""

from dataclasses import dataclass


@dataclass(frozen=True)
class FilterKind:
    """A notice filter the user can set by answering a prompt."""

    command: str
    keyword: str
    param: str
    label: str
    prompt: str
