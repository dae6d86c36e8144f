from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx
import pytest
import typer
from typer.testing import CliRunner

from cli.app import app
from cli.client import ApiClient
from cli.config import CLIConfig, load_config


def _reading(device_id: str, timestamp: int, temperature: float = 21.5) -> Dict[str, Any]:
    return {
        "deviceId": device_id,
        "temperature": temperature,
        "humidity": 40.0,
        "airQualityRaw": 100,
        "co2": 420,
        "nh3": 1,
        "ch4": 2,
        "co": 3,
        "airQualityStatus": "Good",
        "isLight": False,
        "motionDetected": False,
        "timestamp": timestamp,
        "receivedAt": "2024-01-01T00:00:00Z",
    }


class StubClient:
    def __init__(self, config) -> None:
        self.config = config
        self.readings: Dict[str, List[Dict[str, Any]]] = {
            "dev-1": [_reading("dev-1", 3), _reading("dev-1", 2), _reading("dev-1", 1)],
            "dev-2": [_reading("dev-2", 7, temperature=18.0)],
        }
        self.closed = False

    def list_latest(self) -> List[Dict[str, Any]]:
        return [history[0] for history in self.readings.values()]

    def get_latest(self, device_id: str) -> Optional[Dict[str, Any]]:
        history = self.readings.get(device_id)
        return history[0] if history else None

    def get_history(self, device_id: str) -> List[Dict[str, Any]]:
        return list(self.readings.get(device_id, []))

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def stub(monkeypatch) -> StubClient:
    instance = StubClient(config=None)

    def factory(config):
        instance.config = config
        return instance

    monkeypatch.setattr("cli.app.ApiClient", factory)
    return instance


def test_devices_lists_each_device(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["devices"])

    assert result.exit_code == 0
    assert "dev-1: temperature=21.5" in result.stdout
    assert "dev-2: temperature=18.0" in result.stdout
    assert stub.closed is True


def test_latest_renders_reading(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["--base-url", "http://hub:9000/", "latest", "dev-1"])

    assert result.exit_code == 0
    assert "Device dev-1" in result.stdout
    assert "timestamp: 3" in result.stdout
    assert stub.config.base_url == "http://hub:9000"


def test_latest_unknown_device_exits_with_error(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["latest", "ghost"])

    assert result.exit_code == 1
    assert "timestamp:" not in result.stdout


def test_history_with_limit(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["history", "dev-1", "--limit", "2"])

    assert result.exit_code == 0
    assert "History for dev-1" in result.stdout
    assert result.stdout.count("  - ") == 2


def test_history_for_unknown_device(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["history", "ghost"])

    assert result.exit_code == 0
    assert "No readings recorded." in result.stdout


def test_load_config_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("API_BASE_URL", "http://env-host:8080/")
    monkeypatch.setenv("CLI_TIMEOUT", "not-a-number")

    config = load_config()

    assert config.base_url == "http://env-host:8080"
    assert config.timeout == 10.0


def test_api_client_against_mock_transport() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/sensors/dev-1":
            return httpx.Response(200, json=_reading("dev-1", 5))
        if request.url.path == "/api/sensors/ghost":
            return httpx.Response(404, json={"detail": "No readings for device 'ghost'."})
        if request.url.path == "/api/sensors/broken/history":
            return httpx.Response(500, json={"detail": "kaboom"})
        return httpx.Response(200, json=[])

    client = ApiClient(CLIConfig(base_url="http://hub"))
    client.close()
    client._client = httpx.Client(base_url="http://hub", transport=httpx.MockTransport(handler))
    try:
        assert client.get_latest("dev-1")["timestamp"] == 5
        assert client.get_latest("ghost") is None
        assert client.list_latest() == []
        with pytest.raises(typer.Exit):
            client.get_history("broken")
    finally:
        client.close()
