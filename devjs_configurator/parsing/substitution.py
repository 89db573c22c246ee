"""Variable substitution for parsed configuration values.

Leaf strings may contain ``${...}`` markers:

- ``${thisdir}`` becomes the module's directory;
- ``${env:NAME}`` becomes the environment variable ``NAME`` when it is set;
- ``${name}`` becomes a caller-supplied variable of that name.

Anything else is left exactly as written, since configs routinely carry
``${...}`` text meant for other tools. Substitution is a single pass: values
that were substituted in are never scanned again.
"""

from __future__ import annotations

import os
import re
from typing import Any, Mapping

from devjs_configurator.domain.models import SubstitutionContext
from devjs_configurator.errors import SubstitutionError

MARKER_PATTERN = re.compile(r"\$\{([^${}]+)\}")
THISDIR_MARKER = "thisdir"
ENV_PREFIX = "env:"


def _lookup(name: str, ctx: SubstitutionContext) -> str | None:
    if name == THISDIR_MARKER:
        return ctx.base_directory
    if name.startswith(ENV_PREFIX):
        return ctx.env.get(name[len(ENV_PREFIX):])
    if name in ctx.variables:
        value = ctx.variables[name]
        return value if isinstance(value, str) else str(value)
    return None


def substitute_string(text: str, ctx: SubstitutionContext) -> str:
    """Replace every recognised marker in ``text``."""

    def _replace(match: re.Match[str]) -> str:
        value = _lookup(match.group(1).strip(), ctx)
        return match.group(0) if value is None else value

    return MARKER_PATTERN.sub(_replace, text)


def _walk(value: Any, ctx: SubstitutionContext, path: str) -> Any:
    if isinstance(value, str):
        return substitute_string(value, ctx)
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, Mapping):
        walked: dict[str, Any] = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise SubstitutionError(
                    f"object key {key!r} at {path} is not a string"
                )
            walked[key] = _walk(item, ctx, f"{path}.{key}")
        return walked
    if isinstance(value, (list, tuple)):
        return [_walk(item, ctx, f"{path}[{index}]") for index, item in enumerate(value)]
    raise SubstitutionError(
        f"unsupported value of type {type(value).__name__} at {path}"
    )


def substitute(value: Any, ctx: SubstitutionContext) -> Any:
    """Return a copy of ``value`` with markers in every leaf string replaced.

    Args:
        value: A parsed JSON value (dicts, lists, strings, numbers, booleans,
            ``None``). The input is never modified.
        ctx: Values the markers resolve against.

    Raises:
        SubstitutionError: If ``value`` contains something that is not JSON.
    """
    return _walk(value, ctx, "$")


def resolve_vars_path(path: str, ctx: SubstitutionContext) -> str:
    """Substitute markers in a filesystem path and anchor it.

    Relative results are resolved against ``ctx.base_directory`` so a config
    can say ``"certs": "keys/server.pem"`` or ``"${thisdir}/keys/server.pem"``
    and mean the same file.
    """
    resolved = os.path.expanduser(substitute_string(path, ctx))
    if not os.path.isabs(resolved):
        resolved = os.path.join(ctx.base_directory, resolved)
    return os.path.normpath(resolved)


__all__ = [
    "MARKER_PATTERN",
    "resolve_vars_path",
    "substitute",
    "substitute_string",
]
