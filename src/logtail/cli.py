import sys, asyncio
from datetime import datetime, timezone

import click
from eth_utils import to_checksum_address
from loguru import logger
from rich.console import Console
from rich.panel import Panel

from .adapters.checkpoint_jsonl import JSONLCheckpoint
from .adapters.parquet_sink import ParquetEventSink
from .adapters.rpc_httpx import HttpxRPC
from .application.use_cases import chain_head, follow_logs, resolve_start
from .application.utils import topics_fingerprint
from .config import WatchConfig
from .domain.models import LogStreamItem
from .errors import LogTailError

console = Console()


@click.group()
@click.option("--log-level", default="INFO", show_default=True, envvar="LOGTAIL_LOG_LEVEL",
              type=click.Choice(["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False))
def cli(log_level):
    """logtail: follow confirmed contract logs from a JSON-RPC node."""
    logger.remove()
    logger.add(sys.stderr, level=log_level.upper())


@cli.command("head")
@click.option("--rpc", "rpc_url", required=True, envvar="LOGTAIL_RPC_URL", help="RPC endpoint URL")
@click.option("--confirmations", type=int, default=12, show_default=True, envvar="LOGTAIL_CONFIRMATIONS")
def head_cmd(rpc_url, confirmations):
    """Show the chain head and the height considered confirmed."""
    async def run():
        async with HttpxRPC(rpc_url) as rpc:
            return await chain_head(rpc, confirmations)

    try:
        res = asyncio.run(run())
    except LogTailError as e:
        raise click.ClickException(str(e))
    ts = datetime.fromtimestamp(int(res["timestamp"]), tz=timezone.utc).isoformat()
    console.print(Panel(
        f"latest    {res['latest']:,}\n"
        f"confirmed {res['confirmed']:,}  ({confirmations} confirmations)\n"
        f"hash      {res['hash']}\n"
        f"time      {ts}",
        title="chain head",
    ))


@cli.command("watch")
@click.option("--rpc", "rpc_url", required=True, envvar="LOGTAIL_RPC_URL", help="RPC endpoint URL")
@click.option("--address", required=True, envvar="LOGTAIL_ADDRESS", help="Emitter contract address")
@click.option("--topic", "topic0s", multiple=True, help="Event topic0; repeat to OR")
@click.option("--after", type=int, default=0, show_default=True, help="Last block already processed")
@click.option("--confirmations", type=int, default=12, show_default=True, envvar="LOGTAIL_CONFIRMATIONS")
@click.option("--poll-interval", type=float, default=5.0, show_default=True, envvar="LOGTAIL_POLL_INTERVAL",
              help="Seconds between head checks")
@click.option("--timeout", "timeout_s", type=int, default=20, show_default=True, help="Per-request timeout (s)")
@click.option("--checkpoint", "checkpoint_path", type=str, default="", help="JSONL checkpoint path for resume")
@click.option("--out-dir", type=str, default="", help="Write each non-empty range as a Parquet file here")
@click.option("--max-items", type=int, default=0, show_default=True, help="Stop after N ranges (0 = forever)")
def watch_cmd(rpc_url, address, topic0s, after, confirmations, poll_interval, timeout_s,
              checkpoint_path, out_dir, max_items):
    """Stream confirmed log ranges for a contract until interrupted."""
    try:
        cfg = WatchConfig(
            rpc_url=rpc_url, address=address, topic0s=tuple(topic0s), after=after,
            confirmations=confirmations, poll_interval=poll_interval, timeout_s=timeout_s,
            checkpoint_path=checkpoint_path, out_dir=out_dir, max_items=max_items,
        )
        log_filter = cfg.log_filter()
    except LogTailError as e:
        raise click.UsageError(str(e))

    checkpoint = JSONLCheckpoint(cfg.checkpoint_path) if cfg.checkpoint_path else None
    sink = None
    if cfg.out_dir:
        sink = ParquetEventSink(cfg.out_dir, log_filter.addresses[0], topics_fingerprint(cfg.topic0s))

    def show(item: LogStreamItem) -> None:
        console.print(f"[bold]{item.from_block:,}-{item.to_block:,}[/] • {len(item.logs)} logs")

    async def run():
        start = resolve_start(cfg.after, checkpoint)
        console.print(
            f"[bold]watching[/] {to_checksum_address(log_filter.addresses[0])} after block {start:,} "
            f"({cfg.confirmations} confirmations, every {cfg.poll_interval:g}s)"
        )
        async with HttpxRPC(cfg.rpc_url, timeout_s=cfg.timeout_s) as rpc:
            return await follow_logs(
                rpc=rpc, config=cfg.stream_config(after=start),
                sink=sink, checkpoint=checkpoint, on_item=show, max_items=cfg.max_items,
            )

    try:
        res = asyncio.run(run())
    except KeyboardInterrupt:
        console.print("[yellow]interrupted[/]")
        return
    except LogTailError as e:
        raise click.ClickException(str(e))
    console.print(
        f"[bold]summary[/]: [green]items[/]={res['items']}  logs={res['total_logs']}  cursor={res['after']:,}"
    )


if __name__ == "__main__":
    cli()
