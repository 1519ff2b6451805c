"""Runtime execution context for a single run."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any


class Context:
    """Read-only run state passed to target bodies and conditions."""

    def __init__(
        self,
        config: Mapping[str, Any] | None = None,
        *,
        dry_run: bool = False,
    ) -> None:
        self.config: Mapping[str, Any] = MappingProxyType(dict(config or {}))
        self.dry_run = dry_run
        self.target: str | None = None

    def get(self, name: str, default: Any = None) -> Any:
        return self.config.get(name, default)

    def __getitem__(self, name: str) -> Any:
        return self.config[name]

    def __contains__(self, name: object) -> bool:
        return name in self.config

    def has(self, name: str) -> bool:
        """Parameter is set to a non-empty value."""
        value = self.config.get(name)
        if value is None:
            return False
        if isinstance(value, (str, bytes, list, tuple, dict, set, frozenset)):
            return len(value) > 0
        return True
