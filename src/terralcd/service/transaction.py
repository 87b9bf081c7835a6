import asyncio
import logging
from typing import Any, Dict, List, Protocol

import msgspec

from terralcd.configs.lcd_config import LCDConfig
from terralcd.errors import BroadcastError, LCDEncodeError, TerraLCDError, TransactionServiceError
from terralcd.httpclient import LCDClient, RequestPayload
from terralcd.service.transaction_schema import QueryTxRequest, QueryTxResponse
from terralcd.types import (
    CODE_TYPE_OK,
    BroadcastMode,
    DecCoin,
    Msg,
    StdFee,
    StdSignMsg,
    StdTx,
    TxResponse,
)

logger = logging.getLogger(__name__)


class BroadcastReq(msgspec.Struct):
    tx: StdTx
    mode: str


class BaseReq(msgspec.Struct):
    """
    Common request header the LCD expects on tx-building endpoints.
    """
    from_address: str = msgspec.field(name="from")
    memo: str = ""
    chain_id: str = ""
    account_number: str = "0"
    sequence: str = "0"
    gas_prices: List[DecCoin] = []
    gas: str = "auto"
    gas_adjustment: str = ""
    simulate: bool = False


class EstimateFeeReq(msgspec.Struct):
    base_req: BaseReq
    msgs: List[Msg]


class EstimateFeeResult(msgspec.Struct):
    fee: StdFee


class EstimateFeeResponse(msgspec.Struct):
    result: EstimateFeeResult
    height: str = ""


class TransactionService(Protocol):
    async def get_tx_by_hash(self, tx_hash: str) -> TxResponse: ...

    async def query_tx(self, req: QueryTxRequest) -> QueryTxResponse: ...

    async def broadcast_tx(self, tx: StdTx, mode: BroadcastMode) -> TxResponse: ...

    async def estimate_fee(
        self,
        from_address: str,
        msg: StdSignMsg,
        gas_adjustment: str,
        gas_prices: List[DecCoin],
    ) -> StdFee: ...


class LCDTransactionService:
    """
    Transaction endpoints of the LCD: lookup, search, broadcast and fee estimation.
    """

    def __init__(self, client: LCDClient, config: LCDConfig):
        self.client = client
        self.config = config

    async def get_tx_by_hash(self, tx_hash: str) -> TxResponse:
        payload = RequestPayload(method="GET", path=f"/txs/{tx_hash}")
        return await self._request(payload, TxResponse)

    async def query_tx(self, req: QueryTxRequest) -> QueryTxResponse:
        """
        Searches txs by event filter. page/limit win over same-named keys in req.query.
        """
        query: Dict[str, str] = {k: _format_query_value(v) for k, v in req.query.items()}
        if req.page is not None:
            query["page"] = str(req.page)
        if req.limit is not None:
            query["limit"] = str(req.limit)

        payload = RequestPayload(method="GET", path="/txs", query=query)
        return await self._request(payload, QueryTxResponse)

    async def broadcast_tx(self, tx: StdTx, mode: BroadcastMode) -> TxResponse:
        try:
            mode_value = BroadcastMode(mode).value
        except ValueError as e:
            raise TransactionServiceError(f"marshal request body: {e}") from e
        body = self._encode(BroadcastReq(tx=tx, mode=mode_value))
        payload = RequestPayload(method="POST", path="/txs", body=body)
        resp = await self._request(payload, TxResponse)

        # the LCD lags behind the node it broadcast to
        await asyncio.sleep(self.config.broadcast_wait)

        if resp.code != CODE_TYPE_OK:
            logger.info("tx %s rejected with code %d: %s", resp.txhash, resp.code, resp.raw_log)
            raise BroadcastError(resp.raw_log, response=resp)
        return resp

    async def estimate_fee(
        self,
        from_address: str,
        msg: StdSignMsg,
        gas_adjustment: str,
        gas_prices: List[DecCoin],
    ) -> StdFee:
        req = EstimateFeeReq(
            base_req=BaseReq(
                from_address=from_address,
                memo=msg.memo,
                chain_id=msg.chain_id or self.config.chain_id,
                account_number=msg.account_number,
                sequence=msg.sequence,
                gas_prices=gas_prices,
                gas="auto",
                gas_adjustment=gas_adjustment,
                simulate=False,
            ),
            msgs=msg.msgs,
        )
        body = self._encode(req)
        payload = RequestPayload(method="POST", path="/txs/estimate_fee", body=body)
        resp = await self._request(payload, EstimateFeeResponse)
        return resp.result.fee

    def _encode(self, obj: Any) -> bytes:
        try:
            return self.client.encode(obj)
        except LCDEncodeError as e:
            raise TransactionServiceError(f"marshal request body: {e}") from e

    async def _request(self, payload: RequestPayload, type: Any) -> Any:
        try:
            return await self.client.request_json(payload, type)
        except TerraLCDError as e:
            raise TransactionServiceError(f"request json: {e}") from e


def _format_query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
