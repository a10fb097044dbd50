"""aria2 global option access exposed through the callback-style option API."""

from __future__ import annotations

import asyncio
import itertools
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

import httpx
import structlog

from ..config import Aria2Config
from ..exceptions import Aria2RpcError

OptionCallback = Callable[["OptionResult"], None]

BT_TRACKER_OPTION = "bt-tracker"


@dataclass
class OptionResult:
    """Outcome handed to option callbacks."""

    success: bool
    data: dict[str, Any] = field(default_factory=dict)
    error: str | None = None


async def call_with_callback(func: Callable[..., Any], *args: Any) -> Any:
    """Invoke a callback-style ``func(*args, callback)`` and await the callback value."""

    loop = asyncio.get_running_loop()
    future: asyncio.Future[Any] = loop.create_future()

    def _resolve(result: Any) -> None:
        if not future.done():
            future.set_result(result)

    def _callback(result: Any) -> None:
        loop.call_soon_threadsafe(_resolve, result)

    func(*args, _callback)
    return await future


class Aria2OptionClient:
    """Read and change aria2 global options over JSON-RPC."""

    def __init__(
        self,
        config: Aria2Config,
        client: httpx.AsyncClient | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.config = config
        self.logger = logger or structlog.get_logger("tracker_sync.aria2")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=config.timeout)
        self._ids = itertools.count(1)
        self._pending: set[asyncio.Task] = set()

    async def aclose(self) -> None:
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
        if self._owns_client:
            await self._client.aclose()

    async def call(self, method: str, *params: Any) -> Any:
        rpc_params: list[Any] = list(params)
        if self.config.secret:
            rpc_params.insert(0, f"token:{self.config.secret}")
        payload = {
            "jsonrpc": "2.0",
            "id": f"tracker-sync-{next(self._ids)}",
            "method": method,
            "params": rpc_params,
        }
        response = await self._client.post(self.config.rpc_url, json=payload)
        body = response.json()
        if body.get("error"):
            error = body["error"]
            raise Aria2RpcError(error.get("code"), error.get("message", "unknown error"))
        response.raise_for_status()
        return body.get("result")

    async def fetch_global_option(self) -> OptionResult:
        try:
            result = await self.call("aria2.getGlobalOption")
        except (httpx.HTTPError, ValueError, Aria2RpcError) as exc:
            self.logger.warning("aria2_get_option_failed", error=str(exc))
            return OptionResult(success=False, error=str(exc))
        return OptionResult(success=True, data=dict(result or {}))

    async def change_global_option(self, key: str, value: str) -> OptionResult:
        try:
            result = await self.call("aria2.changeGlobalOption", {key: value})
        except (httpx.HTTPError, ValueError, Aria2RpcError) as exc:
            self.logger.warning("aria2_change_option_failed", option=key, error=str(exc))
            return OptionResult(success=False, error=str(exc))
        return OptionResult(success=result == "OK", data={"result": result})

    def get_global_option(self, callback: OptionCallback) -> None:
        self._dispatch(self.fetch_global_option(), callback)

    def set_global_option(self, key: str, value: str, callback: OptionCallback) -> None:
        self._dispatch(self.change_global_option(key, value), callback)

    def _dispatch(self, coro: Awaitable[OptionResult], callback: OptionCallback) -> None:
        task = asyncio.ensure_future(coro)
        self._pending.add(task)

        def _done(finished: asyncio.Task) -> None:
            self._pending.discard(finished)
            if finished.cancelled():
                callback(OptionResult(success=False, error="cancelled"))
            elif finished.exception() is not None:
                callback(OptionResult(success=False, error=str(finished.exception())))
            else:
                callback(finished.result())

        task.add_done_callback(_done)


__all__ = [
    "Aria2OptionClient",
    "BT_TRACKER_OPTION",
    "OptionCallback",
    "OptionResult",
    "call_with_callback",
]
