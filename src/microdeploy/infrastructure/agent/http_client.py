"""HTTP agent client."""

from __future__ import annotations

import uuid
from typing import Any

import httpx
import structlog

from microdeploy.domain.models.cloud import AgentClientError
from microdeploy.domain.ports.services import AgentClient


logger = structlog.get_logger(__name__)


class HttpAgentClient(AgentClient):
    """Talks to the in-VM agent over its HTTP message bus endpoint.

    Each call is a single request; there is no retry here. Transport
    failures, timeouts, non-2xx responses and agent-reported exceptions
    all surface as ``AgentClientError``.
    """

    def __init__(
        self,
        mbus_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._endpoint = f"{mbus_url.rstrip('/')}/agent"
        self._timeout = timeout
        self._transport = transport
        self._reply_to = f"microdeploy-{uuid.uuid4().hex[:8]}"

    @property
    def endpoint(self) -> str:
        return self._endpoint

    async def ping(self) -> str:
        value = await self._send("ping")
        return str(value)

    async def stop(self) -> None:
        await self._send("stop")

    async def list_disk(self) -> list[str]:
        value = await self._send("list_disk")
        if not isinstance(value, list):
            raise AgentClientError("list_disk", f"unexpected response value: {value!r}")
        return [str(cid) for cid in value]

    async def unmount_disk(self, disk_cid: str) -> None:
        await self._send("unmount_disk", disk_cid)

    async def _send(self, method: str, *arguments: Any) -> Any:
        request = {
            "method": method,
            "arguments": list(arguments),
            "reply_to": self._reply_to,
        }
        logger.debug("agent_request", method=method, endpoint=self._endpoint)

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                resp = await client.post(self._endpoint, json=request)
                resp.raise_for_status()
                body = resp.json()
        except httpx.HTTPError as e:
            raise AgentClientError(method, str(e) or type(e).__name__) from e
        except ValueError as e:
            raise AgentClientError(method, f"invalid response body: {e}") from e

        exception = body.get("exception") if isinstance(body, dict) else None
        if exception:
            message = exception.get("message", "") if isinstance(exception, dict) else str(exception)
            raise AgentClientError(method, message)
        if not isinstance(body, dict) or "value" not in body:
            raise AgentClientError(method, f"missing 'value' in response: {body!r}")
        return body["value"]
