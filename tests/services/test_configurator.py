"""Tests for ModuleConfigurator resolution and storage."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path

import httpx
import pytest

from devjs_configurator.app.config import ConfiguratorSettings, MalformedPayloadPolicy
from devjs_configurator.errors import (
    FileReadError,
    IdentityError,
    ParseError,
    RemoteWriteError,
)
from devjs_configurator.infrastructure.filesystem import read_text_file
from devjs_configurator.infrastructure.http import OrchestratorClient
from devjs_configurator.services.configurator import ModuleConfigurator

SOCKET = "/tmp/maestroapi.sock"


class _FakeOrchestrator:
    """Records requests and answers with a canned response or error."""

    def __init__(self, response: httpx.Response | None = None, error: Exception | None = None):
        self.response = response or httpx.Response(200, json={})
        self.error = error
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(
            self.response.status_code,
            headers=self.response.headers,
            content=self.response.content,
        )

    def client_factory(self, settings: ConfiguratorSettings) -> OrchestratorClient:
        return OrchestratorClient(
            settings.socket_path, transport=httpx.MockTransport(self.handler)
        )


class _RecordingReader:
    """File reader that records the paths it was asked for."""

    def __init__(self):
        self.paths: list[str] = []

    async def __call__(self, path: str) -> str:
        self.paths.append(path)
        return await read_text_file(path)


def _remote_body(data: str) -> dict:
    return {
        "configs": [
            {
                "name": "default",
                "job": "thermostat",
                "data": data,
                "encoding": "utf8",
                "files": None,
                "mod_time": "",
            }
        ]
    }


def _make(
    orchestrator: _FakeOrchestrator | None = None,
    reader: _RecordingReader | None = None,
    **settings,
) -> ModuleConfigurator:
    if orchestrator is not None:
        settings.setdefault("socket_path", SOCKET)
    kwargs = {"read_file": reader or _RecordingReader()}
    if orchestrator is not None:
        kwargs["client_factory"] = orchestrator.client_factory
    return ModuleConfigurator(ConfiguratorSettings(**settings), **kwargs)


@pytest.fixture
def module_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "thermostat"
    directory.mkdir()
    (directory / "devicejs.json").write_text('{"name": "thermostat"}', encoding="utf-8")
    (directory / "config.json").write_text(
        '{\n  // local copy\n  "source": "file",\n  "db": "${thisdir}/db.sqlite",\n}',
        encoding="utf-8",
    )
    return directory


class TestRemote:
    def test_valid_remote_config_skips_file(self, module_dir):
        orchestrator = _FakeOrchestrator(
            httpx.Response(
                200, json=_remote_body('{"source": "remote", "dir": "${thisdir}",}')
            )
        )
        reader = _RecordingReader()
        configurator = _make(orchestrator, reader)

        result = asyncio.run(configurator.configure(module_dir, "thermostat"))

        assert result == {"source": "remote", "dir": str(module_dir)}
        assert reader.paths == []
        assert orchestrator.requests[0].url.path == "/jobConfig/thermostat/default"

    def test_config_name_table_selects_variant(self, module_dir):
        orchestrator = _FakeOrchestrator(
            httpx.Response(200, json=_remote_body('{"source": "remote"}'))
        )
        configurator = _make(orchestrator, config_names={"thermostat": "lab"})

        asyncio.run(configurator.configure(module_dir, "thermostat"))

        assert orchestrator.requests[0].url.path == "/jobConfig/thermostat/lab"

    def test_transport_error_falls_back_to_file(self, module_dir, caplog):
        orchestrator = _FakeOrchestrator(error=httpx.ConnectError("no socket"))
        reader = _RecordingReader()
        configurator = _make(orchestrator, reader)

        with caplog.at_level(logging.WARNING):
            result = asyncio.run(configurator.configure(module_dir, "thermostat"))

        assert result == {"source": "file", "db": f"{module_dir}/db.sqlite"}
        assert reader.paths == [str(module_dir / "config.json")]
        assert "No response from orchestrator" in caplog.text

    def test_bad_status_falls_back_to_file(self, module_dir):
        orchestrator = _FakeOrchestrator(httpx.Response(500))
        result = asyncio.run(_make(orchestrator).configure(module_dir, "thermostat"))
        assert result["source"] == "file"

    def test_unparseable_remote_data_falls_back_to_file(self, module_dir, caplog):
        orchestrator = _FakeOrchestrator(httpx.Response(200, json=_remote_body("{oops")))
        with caplog.at_level(logging.DEBUG):
            result = asyncio.run(_make(orchestrator).configure(module_dir, "thermostat"))
        assert result["source"] == "file"
        parse_records = [r for r in caplog.records if "Error parsing config data" in r.message]
        assert [r.levelno for r in parse_records] == [logging.WARNING]
        assert not any(r.levelno >= logging.ERROR for r in caplog.records)

    def test_malformed_body_passed_through_by_default(self, module_dir):
        body = {"configs": [{"name": "default"}]}
        orchestrator = _FakeOrchestrator(httpx.Response(200, json=body))
        reader = _RecordingReader()

        result = asyncio.run(_make(orchestrator, reader).configure(module_dir, "thermostat"))

        assert result == body
        assert reader.paths == []

    def test_malformed_body_falls_back_when_configured(self, module_dir):
        orchestrator = _FakeOrchestrator(httpx.Response(200, json={"configs": []}))
        configurator = _make(
            orchestrator, malformed_payload_policy=MalformedPayloadPolicy.FALLBACK
        )
        result = asyncio.run(configurator.configure(module_dir, "thermostat"))
        assert result["source"] == "file"

    def test_null_body_falls_back_even_in_passthrough(self, module_dir):
        orchestrator = _FakeOrchestrator(httpx.Response(200, content=b"null"))
        result = asyncio.run(_make(orchestrator).configure(module_dir, "thermostat"))
        assert result["source"] == "file"

    @pytest.mark.parametrize("content", [b"", b"  \r\n"])
    def test_empty_body_falls_back_even_in_passthrough(self, module_dir, content):
        orchestrator = _FakeOrchestrator(httpx.Response(200, content=content))
        result = asyncio.run(_make(orchestrator).configure(module_dir, "thermostat"))
        assert result["source"] == "file"


class TestFile:
    def test_no_socket_reads_file(self, module_dir, caplog):
        with caplog.at_level(logging.WARNING):
            result = asyncio.run(_make().configure(module_dir, "thermostat"))
        assert result["source"] == "file"
        assert "No MAESTRO_UNIX_SOCKET defined" in caplog.text

    def test_custom_file_name(self, module_dir):
        (module_dir / "alt.json").write_text('{"source": "alt"}', encoding="utf-8")
        result = asyncio.run(_make().configure(module_dir, "thermostat", "alt.json"))
        assert result == {"source": "alt"}

    def test_missing_file_without_socket_fails(self, tmp_path):
        with pytest.raises(FileReadError) as exc_info:
            asyncio.run(_make().configure(tmp_path, "thermostat"))
        assert exc_info.value.path == str(tmp_path / "config.json")

    def test_missing_file_after_remote_failure_fails(self, tmp_path):
        orchestrator = _FakeOrchestrator(httpx.Response(503))
        with pytest.raises(FileReadError, match="Unable to load configuration"):
            asyncio.run(_make(orchestrator).configure(tmp_path, "thermostat"))

    def test_invalid_file_fails_with_parse_error(self, module_dir, caplog):
        (module_dir / "config.json").write_text('{"a": }', encoding="utf-8")
        with caplog.at_level(logging.ERROR):
            with pytest.raises(ParseError):
                asyncio.run(_make().configure(module_dir, "thermostat"))
        assert "Error parsing config file" in caplog.text


class TestIdentity:
    def test_name_read_from_manifest_first(self, module_dir):
        orchestrator = _FakeOrchestrator(
            httpx.Response(200, json=_remote_body('{"source": "remote"}'))
        )
        reader = _RecordingReader()

        result = asyncio.run(_make(orchestrator, reader).configure(module_dir))

        assert result == {"source": "remote"}
        assert reader.paths == [str(module_dir / "devicejs.json")]
        assert orchestrator.requests[0].url.path == "/jobConfig/thermostat/default"

    def test_missing_manifest_aborts_before_any_lookup(self, tmp_path):
        orchestrator = _FakeOrchestrator(
            httpx.Response(200, json=_remote_body('{"source": "remote"}'))
        )
        reader = _RecordingReader()
        (tmp_path / "config.json").write_text("{}", encoding="utf-8")

        with pytest.raises(IdentityError, match="devicejs.json"):
            asyncio.run(_make(orchestrator, reader).configure(tmp_path))

        assert orchestrator.requests == []
        assert reader.paths == [str(tmp_path / "devicejs.json")]

    @pytest.mark.parametrize("manifest", ['{"version": "1.0"}', '{"name": ""}', "[]", "{bad"])
    def test_manifest_without_name_fails(self, tmp_path, manifest):
        (tmp_path / "devicejs.json").write_text(manifest, encoding="utf-8")
        with pytest.raises(IdentityError):
            asyncio.run(_make().configure(tmp_path))


class TestSetModuleConfig:
    def test_no_socket_is_a_noop(self):
        calls = []

        def factory(settings):
            calls.append(settings)
            raise AssertionError("no client should be built")

        configurator = ModuleConfigurator(ConfiguratorSettings(), client_factory=factory)
        assert asyncio.run(configurator.set_module_config("thermostat", {"a": 1})) is None
        assert calls == []

    def test_posts_wrapped_configuration(self):
        orchestrator = _FakeOrchestrator(httpx.Response(202))
        configurator = _make(orchestrator)

        asyncio.run(configurator.set_module_config("thermostat", {"target": 21.5}))

        request = orchestrator.requests[0]
        assert request.method == "POST"
        assert request.url.path == "/jobConfig/thermostat/default"
        body = json.loads(request.content)
        assert body["name"] == "default"
        assert body["job"] == "thermostat"
        assert body["encoding"] == "utf8"
        assert json.loads(body["data"]) == {"target": 21.5}

    def test_uses_config_name_table_and_override(self):
        orchestrator = _FakeOrchestrator(httpx.Response(201))
        configurator = _make(orchestrator, config_names={"thermostat": "lab"})

        asyncio.run(configurator.set_module_config("thermostat", {}))
        asyncio.run(configurator.set_module_config("thermostat", {}, config_name="prod"))

        paths = [r.url.path for r in orchestrator.requests]
        assert paths == ["/jobConfig/thermostat/lab", "/jobConfig/thermostat/prod"]

    def test_bad_status_raises(self, caplog):
        orchestrator = _FakeOrchestrator(httpx.Response(500))
        with caplog.at_level(logging.ERROR):
            with pytest.raises(RemoteWriteError, match="HTTP error 500"):
                asyncio.run(_make(orchestrator).set_module_config("thermostat", {}))
        assert "Unable to set configuration for module thermostat" in caplog.text

    def test_transport_error_raises(self):
        orchestrator = _FakeOrchestrator(error=httpx.ConnectError("refused"))
        with pytest.raises(RemoteWriteError):
            asyncio.run(_make(orchestrator).set_module_config("thermostat", {}))

    def test_unserialisable_configuration_raises(self):
        orchestrator = _FakeOrchestrator(httpx.Response(201))
        with pytest.raises(RemoteWriteError, match="not JSON serialisable"):
            asyncio.run(_make(orchestrator).set_module_config("thermostat", {"a": {1, 2}}))
        assert orchestrator.requests == []


def test_from_env():
    configurator = ModuleConfigurator.from_env({"MAESTRO_UNIX_SOCKET": SOCKET})
    assert configurator.settings.socket_path == SOCKET
