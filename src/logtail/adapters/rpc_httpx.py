from __future__ import annotations
import asyncio, httpx
from typing import Any

from loguru import logger

from ..domain.models import Block, EventLog, FilterSpec
from ..domain.value_types import Address, BlockTag, Topic
from ..errors import RPCError
from ..ports.rpc import BlockReader, RPCClient

MAX_429_ATTEMPTS = 3

def _to_hex_block(n: int) -> str: return hex(int(n))
def _from_hex(x: Any) -> int: return int(x, 16) if isinstance(x, str) else int(x)

def _filter_params(spec: FilterSpec) -> dict[str, Any]:
    params: dict[str, Any] = {
        "fromBlock": _to_hex_block(spec.from_block),
        "toBlock": _to_hex_block(spec.to_block),
    }
    if spec.addresses:
        params["address"] = spec.addresses[0] if len(spec.addresses) == 1 else list(spec.addresses)
    if spec.topics:
        params["topics"] = [None if slot is None else list(slot) for slot in spec.topics]
    return params

def _parse_log(rl: dict[str, Any]) -> EventLog:
    return EventLog(
        address=Address(rl["address"].lower()),
        topics=tuple(Topic(t.lower()) for t in rl.get("topics", [])),
        data_hex=rl.get("data") or "0x",
        block_number=_from_hex(rl["blockNumber"]),
        block_hash=(rl.get("blockHash") or "").lower(),
        tx_hash=(rl.get("transactionHash") or "").lower(),
        log_index=_from_hex(rl["logIndex"]),
        removed=bool(rl.get("removed", False)),
    )


class HttpxRPC(RPCClient, BlockReader):
    def __init__(
        self,
        rpc_url: str,
        timeout_s: int = 20,
        max_conn: int = 64,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.rpc_url = rpc_url
        self._id = 0
        self.client = httpx.AsyncClient(
            http2=True,
            timeout=httpx.Timeout(timeout_s),
            limits=httpx.Limits(max_connections=max_conn, max_keepalive_connections=max_conn//2),
            transport=transport,
        )

    async def _call(self, method: str, params: list[Any]) -> Any:
        self._id += 1
        payload = {"jsonrpc": "2.0", "id": self._id, "method": method, "params": params}
        # retry on 429 with simple backoff; every other failure surfaces to the caller
        for attempt in range(MAX_429_ATTEMPTS):
            try:
                r = await self.client.post(self.rpc_url, json=payload)
                if r.status_code == 429:
                    ra = r.headers.get("Retry-After")
                    delay = max(1.0, float(ra)) if ra and ra.isdigit() else (1.0 * (2**attempt))
                    logger.warning(f"[HttpxRPC] {method} rate limited, retrying in {delay:.1f}s")
                    await asyncio.sleep(delay); continue
                r.raise_for_status()
                data = r.json()
            except httpx.HTTPError as e:
                raise RPCError(f"{method} transport error: {type(e).__name__}: {e}", method=method) from e
            except ValueError as e:
                raise RPCError(f"{method} returned a non-JSON body", method=method) from e
            if "error" in data:
                err = data["error"]
                code = err.get("code") if isinstance(err, dict) else None
                msg = err.get("message") if isinstance(err, dict) else str(err)
                raise RPCError(f"{method} RPC error code={code} message={msg}", method=method, code=code)
            return data.get("result")
        raise RPCError(f"Retries exhausted for {method}", method=method, code=429)

    async def latest_block(self) -> int:
        result = await self._call("eth_blockNumber", [])
        if result is None:
            raise RPCError("eth_blockNumber returned no result", method="eth_blockNumber")
        return _from_hex(result)

    async def get_logs(self, spec: FilterSpec) -> list[EventLog]:
        res = await self._call("eth_getLogs", [_filter_params(spec)])
        return [_parse_log(rl) for rl in res or []]

    async def get_block(self, block: int | BlockTag = "latest") -> Block:
        tag = block if isinstance(block, str) else _to_hex_block(block)
        res = await self._call("eth_getBlockByNumber", [tag, False])
        if res is None:
            raise RPCError(f"Block {block} not found", method="eth_getBlockByNumber")
        return Block(
            number=_from_hex(res["number"]),
            hash=res["hash"].lower(),
            parent_hash=res["parentHash"].lower(),
            timestamp=_from_hex(res["timestamp"]),
        )

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> "HttpxRPC":
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()
