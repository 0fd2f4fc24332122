"""Base class and utilities for advisory rules."""
from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Any, Union

from .models import AdvisoryContext, Alert, EvaluationWindow, Recommendation

Finding = Union[Alert, Recommendation]


class AdvisoryRule(ABC):
    """Abstract advisory rule with metadata."""

    id: str = ""
    description: str = ""
    version: str = "1.0.0"

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if not cls.id:
            raise ValueError(f"Rule {cls.__name__} must define a non-empty id")

    @abstractmethod
    def evaluate(self, window: EvaluationWindow, context: AdvisoryContext) -> Finding | None:
        """Return the rule's finding, or ``None`` when it does not apply."""

    def resolved_threshold(self, context: AdvisoryContext, key: str, default: Any) -> Any:
        """Helper to fetch rule-specific threshold overrides."""

        return context.rule_threshold(self.id, key, default)

    def __repr__(self) -> str:  # pragma: no cover - convenience only
        return f"<{self.__class__.__name__} id={self.id!r} version={self.version!r}>"


def format_value(value: float) -> str:
    """Render a number the way the advice text shows it (``18`` not ``18.0``)."""

    number = float(value)
    if number.is_integer():
        return str(int(number))
    return str(round(number, 2))


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (22.5 -> 23)."""

    return int(math.floor(value + 0.5))
