"""Async file access for module directories."""

from __future__ import annotations

import asyncio
import os


def _read_text(path: str) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


async def read_text_file(path: str | os.PathLike[str]) -> str:
    """Read a UTF-8 text file without blocking the event loop.

    Raises:
        OSError: If the file is missing or unreadable.
        UnicodeDecodeError: If the file is not UTF-8.
    """
    return await asyncio.to_thread(_read_text, os.fspath(path))


__all__ = ["read_text_file"]
