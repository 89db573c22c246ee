from __future__ import annotations

import asyncio

import pytest

from devjs_configurator.domain.models import SubstitutionContext
from devjs_configurator.errors import ParseError, SubstitutionError
from devjs_configurator.parsing import parse_and_substitute, parse_and_substitute_sync

CTX = SubstitutionContext(base_directory="/srv/mod", env={})


def test_parse_and_substitute_chains_both_stages():
    text = '{"log": "${thisdir}/log.txt", /* c */ "level": 2,}'
    result = asyncio.run(parse_and_substitute(text, CTX))
    assert result == {"log": "/srv/mod/log.txt", "level": 2}


def test_parse_failure_surfaces_through_await():
    with pytest.raises(ParseError):
        asyncio.run(parse_and_substitute("{not json", CTX))


def test_substitution_failure_surfaces(monkeypatch):
    from devjs_configurator.parsing import pipeline

    monkeypatch.setattr(pipeline, "parse_relaxed", lambda _text: {"bad": object()})
    with pytest.raises(SubstitutionError):
        parse_and_substitute_sync("{}", CTX)
