"""Relaxed JSON parsing and ``${...}`` substitution."""

from .pipeline import parse_and_substitute, parse_and_substitute_sync
from .relaxed_json import minify, parse_relaxed
from .substitution import resolve_vars_path, substitute, substitute_string

__all__ = [
    "minify",
    "parse_and_substitute",
    "parse_and_substitute_sync",
    "parse_relaxed",
    "resolve_vars_path",
    "substitute",
    "substitute_string",
]
