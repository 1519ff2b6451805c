"""Target registry: declarations and dependency-closure resolution."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping

from .errors import CyclicDependencyError, DuplicateTargetError, UnknownTargetError
from .target import Body, Condition, Target

logger = logging.getLogger(__name__)


class Registry(Mapping[str, Target]):
    """Named targets, resolvable into dependency-ordered execution plans."""

    def __init__(self, targets: Iterable[Target] = ()) -> None:
        self._targets: dict[str, Target] = {}
        for target in targets:
            self.register(target)

    def register(self, target: Target) -> Target:
        """Add a target; names must be unique."""
        if target.name in self._targets:
            raise DuplicateTargetError(target.name)
        logger.debug("Registered target '%s'", target.name)
        self._targets[target.name] = target
        return target

    def target(
        self,
        name: str | None = None,
        *,
        depends_on: Iterable[str] = (),
        requires: Iterable[str] = (),
        when: Condition | None = None,
        description: str = "",
    ) -> Callable[[Body], Body]:
        """Register the decorated function as the body of a new target."""

        def decorator(func: Body) -> Body:
            self.register(
                Target(
                    name=name or func.__name__,
                    dependencies=list(depends_on),
                    requirements=list(requires),
                    condition=when,
                    body=func,
                    description=description or (func.__doc__ or "").strip(),
                )
            )
            return func

        return decorator

    def resolve(self, name: str) -> list[str]:
        """Return the execution plan for `name`: dependencies first, each once.

        Dependencies are visited in declaration order, so targets without a
        relative constraint keep the order in which they were declared.
        """
        if name not in self._targets:
            raise UnknownTargetError(name)

        plan: list[str] = []
        done: set[str] = set()
        visiting: list[str] = []

        def visit(current: str, referenced_by: str | None) -> None:
            if current in done:
                return
            if current in visiting:
                cycle = visiting[visiting.index(current) :] + [current]
                raise CyclicDependencyError(cycle)
            if current not in self._targets:
                raise UnknownTargetError(current, referenced_by=referenced_by)

            visiting.append(current)
            for dep in self._targets[current].dependencies:
                visit(dep, current)
            visiting.pop()

            done.add(current)
            plan.append(current)

        visit(name, None)
        logger.debug("Resolved plan for '%s': %s", name, plan)
        return plan

    def __getitem__(self, name: str) -> Target:
        return self._targets[name]

    def __contains__(self, name: object) -> bool:
        return name in self._targets

    def __iter__(self) -> Iterator[str]:
        return iter(self._targets)

    def __len__(self) -> int:
        return len(self._targets)

    def __repr__(self) -> str:
        return f"Registry(targets={len(self._targets)})"
