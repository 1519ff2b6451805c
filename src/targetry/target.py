"""Target model and action registration."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, Field, model_validator

from .context import Context
from .errors import CyclicDependencyError

logger = logging.getLogger(__name__)

Body = Callable[[Context], Any]
Condition = Callable[[Context], Any]

_action_registry: dict[str, Body] = {}


def action(name: str):
    """Register a function as a named target body for file-based declarations."""

    def decorator(func):
        _action_registry[name] = func
        return func

    return decorator


class Target(BaseModel):
    """A named unit of build work with declared dependencies."""

    model_config = {"arbitrary_types_allowed": True, "frozen": True}

    name: str = Field(min_length=1)
    dependencies: list[str] = Field(default_factory=list)
    condition: Condition | None = None
    requirements: list[str] = Field(default_factory=list)
    body: Body | None = None
    description: str = ""

    @model_validator(mode="after")
    def _check_self_dependency(self) -> Target:
        if self.name in self.dependencies:
            raise CyclicDependencyError([self.name, self.name])
        return self

    def missing(self, ctx: Context) -> str | None:
        """Return the first required parameter that is not set, if any."""
        for param in self.requirements:
            if not ctx.has(param):
                return param
        return None

    def enabled(self, ctx: Context) -> bool:
        """Evaluate the runtime condition; targets without one always run."""
        if self.condition is None:
            return True
        return bool(self.condition(ctx))

    def __call__(self, ctx: Context) -> Any:
        if self.body is None:
            logger.debug("Target '%s' has no body", self.name)
            return None
        return self.body(ctx)
