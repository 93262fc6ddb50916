"""Result types for bullet tailoring."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class Rewritten:
    """The model produced a tailored version of the bullet."""

    text: str


@dataclass(frozen=True)
class NotSuitable:
    """The model declined to tailor the bullet."""


TailorResult = Union[Rewritten, NotSuitable]


@dataclass
class TailoringSummary:
    """Outcome of a stage-2 tailoring batch."""

    rewritten: int = 0
    not_suitable: int = 0
    failed: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def attempted(self) -> int:
        return self.rewritten + self.not_suitable + self.failed
