"""Regex substitution rules for trip headsigns and stop names."""

import re
from collections.abc import Iterable
from dataclasses import dataclass

WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class TextRule:
    """Case-insensitive regex substitution."""

    pattern: str
    replacement: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "_compiled", re.compile(self.pattern, re.IGNORECASE))

    def apply(self, text: str) -> str:
        """Apply the substitution to text."""
        return self._compiled.sub(self.replacement, text)  # type: ignore[attr-defined]


def clean_text(text: str, rules: Iterable[TextRule]) -> str:
    """Apply rules in order, then collapse whitespace and trim."""
    for rule in rules:
        text = rule.apply(text)
    return WHITESPACE.sub(" ", text).strip()


# Shared building blocks; groups 1 and 2 keep the surrounding separators
CLEAN_AT = TextRule(r"(^|\W)at(\W|$)", r"\1/\2")
CLEAN_AND = TextRule(r"(^|\W)and(\W|$)", r"\1&\2")
CLEAN_BOUNDS = TextRule(r"^(east|west|north|south)bound\b")
KEEP_TO = TextRule(r"^.*\bto\s+")
REMOVE_VIA = TextRule(r"\s+via\s.*$")
