from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from cli.config import CLIConfig

logger = logging.getLogger(__name__)

HISTORY_PATH = "/api/history"


class HistoryUnavailable(RuntimeError):
    """Raised when the telemetry history cannot be fetched or decoded."""


class HistoryClient:
    """Minimal HTTP client for the telemetry history endpoint."""

    def __init__(
        self, config: CLIConfig, transport: Optional[httpx.BaseTransport] = None
    ) -> None:
        self._config = config
        self._client = httpx.Client(
            base_url=config.base_url,
            timeout=config.request_timeout,
            transport=transport,
            headers={
                # Tunnelled servers otherwise answer with an HTML interstitial.
                "ngrok-skip-browser-warning": "true",
                "Content-Type": "application/json",
            },
        )

    def close(self) -> None:
        self._client.close()

    def fetch_history(self) -> List[Dict[str, Any]]:
        try:
            response = self._client.get(HISTORY_PATH)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "History request rejected",
                extra={"status_code": exc.response.status_code},
            )
            raise HistoryUnavailable(
                f"Server Offline: {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise HistoryUnavailable(f"Server unreachable: {exc}") from exc

        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            raise HistoryUnavailable("Invalid Data Format")
        try:
            payload = response.json()
        except ValueError as exc:
            raise HistoryUnavailable("Invalid Data Format") from exc
        if not isinstance(payload, list):
            raise HistoryUnavailable("Invalid Data Format")
        return payload
