"""Registry for discovering and executing advisory rules."""
from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Dict, Type

from .models import AdvisoryContext, EvaluationWindow
from .rule_base import AdvisoryRule, Finding


class RuleRegistry:
    """Keeps track of available rules by id, in registration order."""

    def __init__(self) -> None:
        self._rules: Dict[str, AdvisoryRule] = {}

    def register(self, rule_cls: Type[AdvisoryRule]) -> Type[AdvisoryRule]:
        if rule_cls.id in self._rules:
            raise ValueError(f"Rule '{rule_cls.id}' already registered")
        self._rules[rule_cls.id] = rule_cls()
        return rule_cls

    def values(self) -> Iterable[AdvisoryRule]:
        return self._rules.values()

    def evaluate_all(
        self,
        window: EvaluationWindow,
        context: AdvisoryContext,
        predicate: Callable[[AdvisoryRule], bool] | None = None,
    ) -> list[Finding]:
        """Run every registered rule, optionally filtering, and collect findings."""

        outputs: list[Finding] = []
        for rule in self._rules.values():
            if predicate is not None and not predicate(rule):
                continue
            finding = rule.evaluate(window, context)
            if finding is not None:
                outputs.append(finding)
        return outputs


registry = RuleRegistry()


def register_rule(rule_cls: Type[AdvisoryRule]) -> Type[AdvisoryRule]:
    """Decorator for registering a rule at definition time."""

    return registry.register(rule_cls)
