"""
Outbound sinks for event batches.

A sink's ``send`` returns True when the batch was delivered. Sinks never
retry; the buffered event stream treats a batch as flushed either way.
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
from typing import Any, Dict, Optional, Protocol

from rich.console import Console

from ..exceptions import SinkError
from .events import EventBatch

logger = logging.getLogger(__name__)


class OutboundSink(Protocol):
    def send(self, batch: EventBatch) -> bool: ...


class ConsoleSink:
    """Print what would be posted instead of posting it."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console(stderr=True)

    def send(self, batch: EventBatch) -> bool:
        if batch.events:
            self.console.print(f"[blue]would post {len(batch.events)} events[/]")
        if batch.log_entries:
            self.console.print(f"[green]would post {len(batch.log_entries)} log entries[/]")
        return True


def _post_json(url: str, payload: Dict[str, Any], headers: Dict[str, str], timeout_s: float) -> None:
    data = json.dumps(payload).encode("utf-8")
    request = urllib.request.Request(url, data=data, headers=headers, method="POST")
    try:
        with urllib.request.urlopen(request, timeout=timeout_s) as response:
            response.read()
    except (urllib.error.URLError, OSError) as e:
        raise SinkError(f"POST {url} failed: {e}") from e


class HttpSink:
    """
    POST batches to the event collector.

    Events go to ``{platform_url}/events`` and log entries to
    ``{platform_url}/log-entries``, each with the session id and client
    auth token.
    """

    def __init__(
        self,
        platform_url: str,
        client_auth_token: Optional[str] = None,
        timeout_s: float = 10.0,
    ) -> None:
        self.platform_url = platform_url.rstrip("/")
        self.client_auth_token = client_auth_token
        self.timeout_s = timeout_s

    def _post(self, path: str, body: Dict[str, Any]) -> None:
        headers = {"Content-Type": "application/json"}
        if self.client_auth_token:
            body = {"clientAuthToken": self.client_auth_token, **body}
        _post_json(f"{self.platform_url}{path}", body, headers, self.timeout_s)

    def send(self, batch: EventBatch) -> bool:
        payload = batch.to_payload()
        try:
            if batch.events:
                self._post("/events", {"sessionId": payload["sessionId"], "events": payload["events"]})
            if batch.log_entries:
                self._post(
                    "/log-entries",
                    {"sessionId": payload["sessionId"], "logEntries": payload["logEntries"]},
                )
        except SinkError as e:
            logger.warning("%s", e)
            return False
        return True
