"""Build parameters: declarations, environment lookup and ${...} interpolation."""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterator, Mapping
from typing import Any

from pydantic import BaseModel, Field

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

_INTERP_PATTERN = re.compile(r"\$\$\{|(\$\{([^{}]+)\})")
_ENV = "env"


class Parameter(BaseModel):
    """A named configuration value supplied to a run."""

    name: str = Field(min_length=1)
    default: Any = None
    env: str | None = None
    secret: bool = False
    description: str = ""

    @property
    def env_name(self) -> str:
        return self.env or self.name.upper().replace("-", "_")

    def display(self, value: Any) -> str:
        return "****" if self.secret and value is not None else repr(value)


class Resolver:
    """Resolve ${...} interpolation references against a context dict."""

    def __init__(self, context: Mapping[str, Any] | None = None) -> None:
        self._context = context or {}

    def _resolve_ref(self, ref: str) -> Any:
        """Resolve a dotted reference (e.g., 'env.HOME') against the context."""
        current: Any = self._context

        for part in ref.split("."):
            try:
                current = current[part]
            except (KeyError, TypeError):
                try:
                    current = getattr(current, part)
                except AttributeError:
                    raise ConfigurationError(f"undefined variable '{ref}'") from None

        return current

    def resolve(self, value: Any) -> Any:
        """Resolve ${...} interpolations in a single value.

        A string that is exactly one ${ref} resolves to the referenced object
        (type preserved); embedded references are stringified. Use $${...}
        for a literal ${...}.
        """
        if not isinstance(value, str) or "${" not in value:
            return value

        match = re.fullmatch(r"\$\{([^{}]+)\}", value)
        if match:
            return self._resolve_ref(match.group(1).strip())

        def _replace(m: re.Match) -> str:  # type: ignore[type-arg]
            if m.group(0) == "$${":
                return "${"
            return str(self._resolve_ref(m.group(2).strip()))

        return _INTERP_PATTERN.sub(_replace, value)


class _Values(Mapping[str, Any]):
    """Raw parameter values, interpolated on first access."""

    def __init__(self, raw: dict[str, Any], environ: Mapping[str, str]) -> None:
        self._raw = raw
        self._environ = environ
        self._resolved: dict[str, Any] = {}
        self._resolving: list[str] = []

    def __getitem__(self, name: str) -> Any:
        if name == _ENV:
            return self._environ
        if name in self._resolved:
            return self._resolved[name]
        if name not in self._raw:
            raise ConfigurationError(f"undefined variable '{name}'")
        if name in self._resolving:
            cycle = self._resolving[self._resolving.index(name) :] + [name]
            raise ConfigurationError(f"Circular parameter reference: {' -> '.join(cycle)}")

        self._resolving.append(name)
        try:
            value = Resolver(self).resolve(self._raw[name])
        finally:
            self._resolving.pop()

        self._resolved[name] = value
        return value

    def __iter__(self) -> Iterator[str]:
        return iter(self._raw)

    def __len__(self) -> int:
        return len(self._raw)


class Parameters(Mapping[str, Parameter]):
    """Declared parameters, resolved into a run configuration."""

    def __init__(self) -> None:
        self._params: dict[str, Parameter] = {}

    def declare(self, param: Parameter) -> Parameter:
        if param.name == _ENV:
            raise ConfigurationError(f"Parameter name '{_ENV}' is reserved for environment lookups")
        if param.name in self._params:
            raise ConfigurationError(f"Duplicate parameter: '{param.name}'")
        logger.debug("Declared parameter '%s'", param.name)
        self._params[param.name] = param
        return param

    def resolve(
        self,
        overrides: Mapping[str, Any] | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> dict[str, Any]:
        """Build a run configuration: overrides > environment > defaults.

        Values may reference other parameters with ${name} and the environment
        with ${env.NAME}; references are resolved transitively. Overrides for
        undeclared names are passed through unchanged. Values that end up as
        None are left out so requirement checks treat them as missing.
        """
        overrides = overrides or {}
        if _ENV in overrides:
            raise ConfigurationError(f"Parameter name '{_ENV}' is reserved for environment lookups")
        environ = os.environ if environ is None else environ

        raw: dict[str, Any] = {}
        for name, param in self._params.items():
            if name in overrides:
                raw[name] = overrides[name]
            elif param.env_name in environ:
                raw[name] = environ[param.env_name]
            else:
                raw[name] = param.default
        for name, value in overrides.items():
            raw.setdefault(name, value)

        values = _Values(raw, environ)
        config: dict[str, Any] = {}
        for name in raw:
            value = values[name]
            if value is None:
                continue
            param = self._params.get(name)
            logger.debug("Parameter %s = %s", name, param.display(value) if param else repr(value))
            config[name] = value

        return config

    def __getitem__(self, name: str) -> Parameter:
        return self._params[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._params)

    def __len__(self) -> int:
        return len(self._params)

    def __repr__(self) -> str:
        return f"Parameters(params={len(self._params)})"
