"""Explicit evaluation context for one template render."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping


@dataclass(frozen=True)
class RenderContext:
    """Declared locals plus shared helpers; nothing else reaches the template."""

    template: str
    locals: Mapping[str, Any] = field(default_factory=dict)
    helpers: Mapping[str, Callable[..., Any]] = field(default_factory=dict)

    def variables(self) -> Dict[str, Any]:
        variables: Dict[str, Any] = dict(self.locals)
        variables.update(self.helpers)
        return variables


__all__ = ["RenderContext"]
