#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from __future__ import annotations

import httpx
import pytest

from wb.connector_web.cli import main as cli
from wb.connector_web.cli.main import ExitCode
from wb.connector_web.server.cloud.connector_http import ConnectorHttpClient


@pytest.fixture
def no_config(tmp_path, monkeypatch):
    monkeypatch.setenv("CONNECTOR_WEB_CONFIG", str(tmp_path / "missing.conf"))
    monkeypatch.delenv("TOKEN", raising=False)
    monkeypatch.delenv("CALLBACK_URL", raising=False)


def _mock_client(monkeypatch, handler):
    def make(cfg):
        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return ConnectorHttpClient(api_url=cfg.api_url, token=cfg.token, client=http)

    monkeypatch.setattr(cli, "_make_client", make)


def test_no_command_prints_help(capsys):
    assert cli.main([]) == ExitCode.INIT_ERROR
    assert "Available commands" in capsys.readouterr().out


def test_missing_token(no_config, capsys):
    assert cli.main(["register-callback"]) == ExitCode.INIT_ERROR
    assert "Configuration error" in capsys.readouterr().out


def test_register_callback_without_url(no_config, monkeypatch):
    monkeypatch.setenv("TOKEN", "t")
    assert cli.main(["register-callback"]) == ExitCode.INIT_ERROR


def test_register_callback_success(no_config, monkeypatch, capsys):
    monkeypatch.setenv("TOKEN", "t")
    _mock_client(monkeypatch, lambda request: httpx.Response(204))

    rc = cli.main(["register-callback", "--url", "http://bridge.example/notification"])

    assert rc == ExitCode.GEN_SUCCESS
    assert "successful" in capsys.readouterr().out


def test_register_callback_rejected(no_config, monkeypatch):
    monkeypatch.setenv("TOKEN", "t")
    _mock_client(monkeypatch, lambda request: httpx.Response(401, text="unauthorized"))

    rc = cli.main(["register-callback", "--url", "http://bridge.example/notification"])

    assert rc == ExitCode.REGISTER_REJECTED


def test_read_prints_async_response_id(no_config, monkeypatch, capsys):
    monkeypatch.setenv("TOKEN", "t")
    _mock_client(monkeypatch, lambda request: httpx.Response(202, json={"async-response-id": "r42"}))

    assert cli.main(["read", "device-1"]) == ExitCode.GEN_SUCCESS
    assert "r42" in capsys.readouterr().out


def test_read_without_async_response_id(no_config, monkeypatch):
    monkeypatch.setenv("TOKEN", "t")
    _mock_client(monkeypatch, lambda request: httpx.Response(200, json={}))

    assert cli.main(["read", "device-1", "--path", "/Test5/0/D"]) == ExitCode.READ_NO_ASYNC_ID
