"""Relaxed JSON: strict JSON plus comments and trailing commas.

Module configuration files are edited by hand, so ``//`` line comments,
``/* */`` block comments and a trailing comma before ``}`` or ``]`` are
accepted. Parsing is delegated to :mod:`json5`, whose grammar covers both and
tracks string literals, so ``"http://host"`` survives untouched.
"""

from __future__ import annotations

import json
from typing import Any

import json5

from devjs_configurator.errors import ParseError


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def parse_relaxed(text: str | bytes) -> Any:
    """Parse relaxed JSON text into Python values.

    Args:
        text: Configuration text; bytes are decoded as UTF-8 (BOM tolerated).

    Returns:
        The parsed JSON value.

    Raises:
        ParseError: If the text is not relaxed JSON or holds ``NaN`` or
            ``Infinity``. ``original_text`` always holds the caller's input.
    """
    if isinstance(text, (bytes, bytearray)):
        try:
            text = bytes(text).decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ParseError(f"text is not valid UTF-8: {exc}", repr(text)) from exc
    if not isinstance(text, str):
        raise ParseError(f"expected text, got {type(text).__name__}", repr(text))

    original = text
    body = text.lstrip("\ufeff")
    if not body.strip():
        raise ParseError("no JSON content", original)
    try:
        return json5.loads(body, parse_constant=_reject_constant)
    except ValueError as exc:
        raise ParseError(str(exc), original) from exc


def minify(text: str | bytes) -> str:
    """Return relaxed JSON ``text`` as compact strict JSON.

    Raises:
        ParseError: If ``text`` does not parse.
    """
    return json.dumps(parse_relaxed(text), separators=(",", ":"), ensure_ascii=False)


__all__ = ["minify", "parse_relaxed"]
