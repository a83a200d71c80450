"""Autocomplete data models."""

from dataclasses import dataclass
from typing import Literal

SuggestionType = Literal["syntax", "user", "repository", "label", "template"]


@dataclass(frozen=True)
class AutocompleteSuggestion:
    """One autocomplete candidate for the query editor."""

    type: SuggestionType
    value: str
    display: str
    description: str | None = None
    category: str | None = None
    insert_text: str | None = None
