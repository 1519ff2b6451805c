"""HCL loading engine: parse .hcl files into targets and parameters."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .workspace import Workspace

import hcl2
import jinja2

from .context import Context
from .errors import ConfigurationError, UnknownActionError
from .params import Parameter
from .target import Condition, Target, _action_registry

logger = logging.getLogger(__name__)

_TARGET_KEYS = {"depends_on", "requires", "when", "action", "description"}
_PARAMETER_KEYS = {"default", "env", "secret", "description"}

_expressions = jinja2.Environment(autoescape=False)


def scan(
    path: str | Path,
    *,
    recurse: bool = True,
    context: dict[str, Any] | None = None,
) -> Workspace:
    """Scan a directory for .hcl files and return a ready Workspace."""
    from .workspace import Workspace

    ws = Workspace(context=context)
    ws.scan(path, recurse=recurse)
    return ws


def load(
    file: Path,
    *,
    context: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Load and parse a single HCL file, rendering Jinja2 templates with context."""
    text = file.read_text()
    ctx = context if context is not None else {}
    env = jinja2.Environment(
        undefined=jinja2.StrictUndefined,
        keep_trailing_newline=True,
        autoescape=False,
    )
    try:
        template = env.from_string(text)
        text = template.render(ctx)
    except jinja2.TemplateError as exc:
        raise ConfigurationError(f"{file}: {exc}") from exc
    try:
        return hcl2.loads(text)
    except Exception as exc:
        raise ConfigurationError(f"{file}: {exc}") from exc


def _compile_condition(name: str, source: Any) -> Condition:
    """Compile a `when` value; expressions are evaluated against each run's configuration."""
    if isinstance(source, bool):
        return _constant(source)
    if not isinstance(source, str):
        raise ConfigurationError(f"Target '{name}': 'when' must be a boolean or an expression")

    try:
        expr = _expressions.compile_expression(source)
    except jinja2.TemplateSyntaxError as exc:
        raise ConfigurationError(f"Target '{name}': invalid condition '{source}': {exc}") from exc

    def condition(ctx: Context) -> bool:
        return bool(expr({"env": os.environ, "config": ctx.config, **ctx.config}))

    condition.__qualname__ = f"when[{source}]"
    return condition


def _constant(value: bool) -> Condition:
    def condition(ctx: Context) -> bool:
        return value

    condition.__qualname__ = f"when[{str(value).lower()}]"
    return condition


def _as_list(name: str, key: str, value: Any) -> list[str]:
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        raise ConfigurationError(f"Target '{name}': '{key}' must be a list of names")
    return [str(v) for v in value]


def decode_target(name: str, data: dict[str, Any]) -> Target:
    """Decode a target block into a Target, looking up its action by name."""
    unknown = set(data) - _TARGET_KEYS
    if unknown:
        raise ConfigurationError(f"Target '{name}': unknown attribute(s) {sorted(unknown)}")

    body = None
    action_name = data.get("action")
    if action_name is not None:
        if action_name not in _action_registry:
            raise UnknownActionError(action_name)
        body = _action_registry[action_name]

    when = data.get("when")
    condition = _compile_condition(name, when) if "when" in data else None
    logger.debug("Decoding target '%s' (action=%s)", name, action_name)
    return Target(
        name=name,
        dependencies=_as_list(name, "depends_on", data.get("depends_on", [])),
        requirements=_as_list(name, "requires", data.get("requires", [])),
        condition=condition,
        body=body,
        description=data.get("description", ""),
    )


def decode_parameter(name: str, data: dict[str, Any]) -> Parameter:
    """Decode a parameter block into a Parameter declaration."""
    unknown = set(data) - _PARAMETER_KEYS
    if unknown:
        raise ConfigurationError(f"Parameter '{name}': unknown attribute(s) {sorted(unknown)}")
    return Parameter(name=name, **data)
