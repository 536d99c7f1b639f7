"""Outcome of a single translation request."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Translated:
    source: str
    translation: str

    is_fallback = False

    @property
    def text(self) -> str:
        return self.translation


@dataclass(frozen=True)
class Fallback:
    """Translation could not be obtained; consumers see the source text."""

    source: str
    reason: str = ''

    is_fallback = True

    @property
    def text(self) -> str:
        return self.source
