from __future__ import annotations

from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the telemetry hub's query API."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def list_latest(self) -> List[Dict[str, Any]]:
        return self._get("/api/sensors")

    def get_latest(self, device_id: str) -> Optional[Dict[str, Any]]:
        """Latest reading for ``device_id``, or ``None`` if it never reported."""
        try:
            response = self._client.get(f"/api/sensors/{quote(device_id, safe='')}")
            if response.status_code == 404:
                return None
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        return response.json()

    def get_history(self, device_id: str) -> List[Dict[str, Any]]:
        return self._get(f"/api/sensors/{quote(device_id, safe='')}/history")

    def _get(self, path: str) -> Any:
        try:
            response = self._client.get(path)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        return response.json()

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("detail")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
