"""Rule package that ensures registration on import."""
from __future__ import annotations

from importlib import import_module

# Registration order is output order: alerts by priority, then recommendations.
_MODULES = [
    "hypoglycemia",
    "steroid_pattern",
    "oral_agents",
    "basal_insulin",
    "prandial_insulin",
]

# Import selected rules to trigger registration side-effects.
for _module in _MODULES:
    import_module(f"{__name__}.{_module}")

__all__ = list(_MODULES)
