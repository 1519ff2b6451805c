"""Workspace: targets and parameters accumulated from HCL files."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

from . import hcl
from .errors import ConfigurationError
from .params import Parameters
from .registry import Registry
from .target import Target

logger = logging.getLogger(__name__)


class Workspace(Mapping[str, Target]):
    """Parsed declarations that resolve into a registry on access."""

    def __init__(self, context: dict[str, Any] | None = None) -> None:
        self._context = context
        self._pending_targets: dict[str, dict[str, Any]] = {}
        self._pending_params: dict[str, dict[str, Any]] = {}
        self.default: str | None = None

    def load(self, file: str | Path) -> None:
        """Parse a single HCL file and collect its target and parameter blocks.

        A top-level `default` attribute names the target to run when none is
        requested. Raises ConfigurationError if a target or parameter name, or
        the default, is already loaded.
        """
        file = Path(file)
        logger.debug("Loading %s", file)
        data = hcl.load(file, context=self._context)

        if "default" in data:
            default = data["default"]
            if not isinstance(default, str) or not default:
                raise ConfigurationError(f"{file}: 'default' must be a target name")
            if self.default is not None:
                raise ConfigurationError(f"{file}: default target already set to '{self.default}'")
            logger.debug("Default target is '%s'", default)
            self.default = default

        for block in data.get("target", []):
            for name, body in block.items():
                if name in self._pending_targets:
                    raise ConfigurationError(f"{file}: duplicate target '{name}'")
                logger.debug("Found target '%s'", name)
                self._pending_targets[name] = body

        for block in data.get("parameter", []):
            for name, body in block.items():
                if name in self._pending_params:
                    raise ConfigurationError(f"{file}: duplicate parameter '{name}'")
                logger.debug("Found parameter '%s'", name)
                self._pending_params[name] = body

    def scan(self, path: str | Path, *, recurse: bool = True) -> None:
        """Load every .hcl file under a directory, in sorted order."""
        path = Path(path)
        if not path.is_dir():
            logger.debug("Skipping scan of missing directory %s", path)
            return
        pattern = "**/*.hcl" if recurse else "*.hcl"
        for file in sorted(path.glob(pattern)):
            self.load(file)

    @property
    def registry(self) -> Registry:
        """Build a fresh registry from the loaded target blocks."""
        return Registry(hcl.decode_target(name, data) for name, data in self._pending_targets.items())

    @property
    def parameters(self) -> Parameters:
        """Build the declared parameters from the loaded parameter blocks."""
        params = Parameters()
        for name, data in self._pending_params.items():
            params.declare(hcl.decode_parameter(name, data))
        return params

    def __getitem__(self, name: str) -> Target:
        if name not in self._pending_targets:
            raise KeyError(name)
        return hcl.decode_target(name, self._pending_targets[name])

    def __contains__(self, name: object) -> bool:
        return name in self._pending_targets

    def __iter__(self) -> Iterator[str]:
        return iter(self._pending_targets)

    def __len__(self) -> int:
        return len(self._pending_targets)

    def __repr__(self) -> str:
        return f"Workspace(targets={len(self._pending_targets)}, parameters={len(self._pending_params)})"
