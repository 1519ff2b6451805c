"""Exception hierarchy for target declaration and execution."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .engine import RunResult


class TargetryError(Exception):
    """Base exception for all targetry errors."""


# -- Declaration errors --


class ConfigurationError(TargetryError):
    """Target, parameter or file declarations are invalid."""


class DuplicateTargetError(ConfigurationError):
    """A target with the same name is already registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Duplicate target: '{name}'")
        self.name = name


class UnknownActionError(ConfigurationError):
    """A declaration references an action that was never registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown action: '{name}'")
        self.name = name


# -- Run errors --


class RunError(TargetryError):
    """A run terminated before completing its plan.

    `target` names the offending target (if any) and `result` holds the
    outcomes recorded before the run halted.
    """

    def __init__(self, message: str, *, target: str | None = None) -> None:
        super().__init__(message)
        self.target = target
        self.result: RunResult | None = None


class UnknownTargetError(RunError):
    """A requested or referenced target is not registered."""

    def __init__(self, name: str, *, referenced_by: str | None = None) -> None:
        if referenced_by is None:
            message = f"Unknown target: '{name}'"
        else:
            message = f"Target '{referenced_by}' depends on unknown target: '{name}'"
        super().__init__(message, target=referenced_by or name)
        self.name = name
        self.referenced_by = referenced_by


class CyclicDependencyError(RunError):
    """The dependency graph contains a cycle."""

    def __init__(self, cycle: list[str]) -> None:
        super().__init__(
            f"Circular dependency detected: {' -> '.join(cycle)}",
            target=cycle[0] if cycle else None,
        )
        self.cycle = cycle


class MissingParameterError(RunError):
    """A required parameter is absent when its target is about to run."""

    def __init__(self, target: str, parameter: str) -> None:
        super().__init__(
            f"Target '{target}' requires parameter '{parameter}'",
            target=target,
        )
        self.parameter = parameter


class TargetExecutionError(RunError):
    """A target body (or its condition) raised."""

    def __init__(self, target: str, cause: BaseException) -> None:
        super().__init__(f"Target '{target}' failed: {cause}", target=target)
        self.cause = cause
