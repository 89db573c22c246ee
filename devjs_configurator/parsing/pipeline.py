"""Relaxed parse followed by substitution, as one step."""

from __future__ import annotations

import asyncio
from typing import Any

from devjs_configurator.domain.models import SubstitutionContext
from devjs_configurator.parsing.relaxed_json import parse_relaxed
from devjs_configurator.parsing.substitution import substitute


def parse_and_substitute_sync(text: str | bytes, ctx: SubstitutionContext) -> Any:
    """Parse ``text`` as relaxed JSON and substitute markers in the result.

    Raises:
        ParseError: If the text is not valid relaxed JSON.
        SubstitutionError: If the parsed value cannot be substituted.
    """
    return substitute(parse_relaxed(text), ctx)


async def parse_and_substitute(text: str | bytes, ctx: SubstitutionContext) -> Any:
    """Awaitable form of :func:`parse_and_substitute_sync`.

    Large configuration blobs are parsed off the event loop.
    """
    return await asyncio.to_thread(parse_and_substitute_sync, text, ctx)


__all__ = ["parse_and_substitute", "parse_and_substitute_sync"]
