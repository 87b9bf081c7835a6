import asyncio
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Coroutine, Dict, List, Optional, Tuple, Type, TypeVar

import msgspec
import typer
from dotenv import load_dotenv

from terralcd.configs.lcd_config import LCDConfig
from terralcd.errors import BroadcastError, TerraLCDError
from terralcd.httpclient import LCDClient
from terralcd.service.transaction import LCDTransactionService, TransactionService
from terralcd.service.transaction_schema import QueryTxRequest
from terralcd.types import BroadcastMode, StdSignMsg, StdTx, parse_dec_coins

load_dotenv()

DEFAULT_GAS_ADJUSTMENT = "1.4"
DEFAULT_GAS_PRICES = "0.15uluna"

T = TypeVar("T")


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


# --- APPS ---
app = typer.Typer(help="terralcd: Terra LCD transaction client")

tx_app = typer.Typer(help="Transaction lookup, search, broadcast and fee estimation.")
app.add_typer(tx_app, name="tx")


@app.callback()
def configure(
    log_level: LogLevel = typer.Option(LogLevel.WARNING, "--log-level", case_sensitive=False, help="Python logging level"),
):
    logging.basicConfig(
        level=log_level.value,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def get_service(config: LCDConfig) -> Tuple[LCDClient, TransactionService]:
    """Helper to wire a client and the transaction service for one command."""
    client = LCDClient(config)
    return client, LCDTransactionService(client, config)


def echo_json(obj: Any) -> None:
    typer.echo(msgspec.json.format(msgspec.json.encode(obj), indent=2).decode())


def load_json_file(path: Path, type: Type[T]) -> T:
    """
    Reads a JSON document into `type`. Accepts the amino envelope
    {"type": "core/StdTx", "value": {...}} produced by terracli.
    """
    if not path.exists():
        typer.secho(f"❌ File not found: {path}", fg=typer.colors.RED)
        raise typer.Exit(1)
    try:
        raw: Any = msgspec.json.decode(path.read_bytes())
        if isinstance(raw, dict) and set(raw) == {"type", "value"}:
            raw = raw["value"]
        return msgspec.convert(raw, type=type, strict=False)
    except msgspec.DecodeError as e:
        typer.secho(f"❌ Invalid {type.__name__} in {path}: {e}", fg=typer.colors.RED)
        raise typer.Exit(1)


def parse_query(pairs: List[str]) -> Dict[str, Any]:
    query: Dict[str, Any] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            typer.secho(f"❌ Expected key=value, got: {pair}", fg=typer.colors.RED)
            raise typer.Exit(1)
        query[key] = value
    return query


def run(command: Coroutine[Any, Any, T]) -> T:
    try:
        return asyncio.run(command)
    except BroadcastError as e:
        typer.secho(f"❌ Broadcast rejected: {e}", fg=typer.colors.RED)
        if e.response is not None:
            echo_json(e.response)
        raise typer.Exit(1)
    except TerraLCDError as e:
        typer.secho(f"❌ {e}", fg=typer.colors.RED)
        raise typer.Exit(1)


# --- 🔎 TX COMMANDS ---

@tx_app.command("get")
def get_tx(tx_hash: str = typer.Argument(..., help="Transaction hash")):
    """Fetch a single transaction by hash."""
    client, service = get_service(LCDConfig.from_env())

    async def _execute():
        try:
            return await service.get_tx_by_hash(tx_hash)
        finally:
            await client.aclose()

    echo_json(run(_execute()))


@tx_app.command("query")
def query_tx(
    page: Optional[int] = typer.Option(None, help="Page number (1-based)"),
    limit: Optional[int] = typer.Option(None, help="Results per page"),
    query: List[str] = typer.Option([], "--query", "-q", help="Event filter as key=value, repeatable"),
):
    """Search transactions by event filters, e.g. -q message.sender=terra1..."""
    req = QueryTxRequest(page=page, limit=limit, query=parse_query(query))
    client, service = get_service(LCDConfig.from_env())

    async def _execute():
        try:
            return await service.query_tx(req)
        finally:
            await client.aclose()

    result = run(_execute())
    typer.secho(
        f"📄 page {result.page_number}/{result.page_total}, {result.total_count} total",
        fg=typer.colors.CYAN,
        err=True,
    )
    echo_json(result)


@tx_app.command("broadcast")
def broadcast(
    tx_file: Path = typer.Argument(..., help="Signed StdTx JSON"),
    mode: BroadcastMode = typer.Option(BroadcastMode.SYNC, help="sync, async or block"),
):
    """Broadcast a signed transaction."""
    tx = load_json_file(tx_file, StdTx)
    client, service = get_service(LCDConfig.from_env())

    async def _execute():
        try:
            return await service.broadcast_tx(tx, mode)
        finally:
            await client.aclose()

    result = run(_execute())
    typer.secho(f"✅ Broadcast accepted: {result.txhash}", fg=typer.colors.GREEN, err=True)
    echo_json(result)


@tx_app.command("estimate-fee")
def estimate_fee(
    sign_msg_file: Path = typer.Argument(..., help="StdSignMsg JSON"),
    from_address: str = typer.Option(..., "--from", help="Signer address"),
    gas_adjustment: str = typer.Option(DEFAULT_GAS_ADJUSTMENT, help="Multiplier applied to simulated gas"),
    gas_prices: str = typer.Option(DEFAULT_GAS_PRICES, help="Comma separated, e.g. 0.15uluna,0.1uusd"),
):
    """Simulate a message and report the fee the node would charge."""
    msg = load_json_file(sign_msg_file, StdSignMsg)
    try:
        prices = parse_dec_coins(gas_prices)
    except ValueError as e:
        typer.secho(f"❌ {e}", fg=typer.colors.RED)
        raise typer.Exit(1)

    client, service = get_service(LCDConfig.from_env())

    async def _execute():
        try:
            return await service.estimate_fee(from_address, msg, gas_adjustment, prices)
        finally:
            await client.aclose()

    echo_json(run(_execute()))


def main():
    app()


if __name__ == "__main__":
    main()
