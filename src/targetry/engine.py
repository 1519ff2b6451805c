"""Execution engine: run targets in dependency order, once each."""

from __future__ import annotations

import asyncio
import enum
import inspect
import logging
import time
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from .context import Context
from .errors import MissingParameterError, RunError, TargetExecutionError
from .registry import Registry

logger = logging.getLogger(__name__)


class Outcome(enum.StrEnum):
    EXECUTED = "executed"
    SKIPPED_CONDITION = "skipped-by-condition"
    SKIPPED_MEMOIZED = "skipped-by-memoization"
    DRY_RUN = "dry-run"


@dataclass(frozen=True)
class TargetResult:
    name: str
    outcome: Outcome
    duration: float = 0.0


@dataclass
class RunResult:
    """Outcome of every plan entry processed by a run, in plan order."""

    results: list[TargetResult] = field(default_factory=list)

    def __iter__(self) -> Iterator[TargetResult]:
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)

    def _names(self, *outcomes: Outcome) -> list[str]:
        return [r.name for r in self.results if r.outcome in outcomes]

    @property
    def executed(self) -> list[str]:
        return self._names(Outcome.EXECUTED)

    @property
    def skipped(self) -> list[str]:
        return self._names(Outcome.SKIPPED_CONDITION, Outcome.SKIPPED_MEMOIZED)

    @property
    def completed(self) -> list[str]:
        """Targets that are done for this run, whether or not their body ran."""
        return self._names(Outcome.EXECUTED, Outcome.SKIPPED_CONDITION, Outcome.DRY_RUN)


class Engine:
    """Runs targets from a registry, strictly sequentially."""

    def __init__(self, registry: Registry) -> None:
        self.registry = registry

    def plan(self, targets: str | Iterable[str]) -> list[str]:
        """Concatenated execution plans for the requested targets.

        A name shared by several requests appears once per request; the run
        memoizes repeats.
        """
        if isinstance(targets, str):
            targets = [targets]
        plan: list[str] = []
        for name in targets:
            plan.extend(self.registry.resolve(name))
        return plan

    def run(
        self,
        targets: str | Iterable[str],
        config: Mapping[str, Any] | None = None,
        *,
        dry_run: bool = False,
    ) -> RunResult:
        """Run the requested targets and their dependencies.

        Blocks until every body has resolved; use `run_async` from inside a
        running event loop.
        """
        return asyncio.run(self.run_async(targets, config, dry_run=dry_run))

    async def run_async(
        self,
        targets: str | Iterable[str],
        config: Mapping[str, Any] | None = None,
        *,
        dry_run: bool = False,
    ) -> RunResult:
        ctx = Context(config, dry_run=dry_run)
        result = RunResult()

        # resolve everything up front; nothing runs if the graph is invalid
        try:
            plan = self.plan(targets)
        except RunError as exc:
            exc.result = result
            raise

        completed: set[str] = set()
        logger.debug("Executing plan: %s", plan)

        for name in plan:
            if name in completed:
                logger.debug("Skipping %s; already completed", name)
                result.results.append(TargetResult(name, Outcome.SKIPPED_MEMOIZED))
                continue

            try:
                outcome, duration = await self._execute(name, ctx)
            except RunError as exc:
                exc.result = result
                raise

            completed.add(name)
            result.results.append(TargetResult(name, outcome, duration))

        return result

    async def _execute(self, name: str, ctx: Context) -> tuple[Outcome, float]:
        target = self.registry[name]
        ctx.target = name

        param = target.missing(ctx)
        if param is not None:
            logger.error("Target '%s' is missing parameter '%s'", name, param)
            raise MissingParameterError(name, param)

        started = time.monotonic()
        try:
            if not target.enabled(ctx):
                logger.info("Skipping %s; condition is false", name)
                return Outcome.SKIPPED_CONDITION, 0.0

            if ctx.dry_run:
                logger.info("[DRY RUN] Would execute %s", name)
                return Outcome.DRY_RUN, 0.0

            logger.info("Executing %s", name)
            value = target(ctx)
            if inspect.isawaitable(value):
                await value
        except Exception as exc:
            logger.error("Target '%s' failed", name, exc_info=True)
            raise TargetExecutionError(name, exc) from exc

        duration = time.monotonic() - started
        logger.info("Finished %s in %.2fs", name, duration)
        return Outcome.EXECUTED, duration
