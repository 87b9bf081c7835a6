import re
from enum import Enum
from typing import Any, Dict, List, Optional

import msgspec

DEC_COIN_PATTERN = re.compile(r"^(\d+(?:\.\d+)?)([a-zA-Z][a-zA-Z0-9/]{2,127})$")

# ABCI result code for a transaction that passed CheckTx/DeliverTx.
CODE_TYPE_OK = 0

# Free-form tx search filter, e.g. {"message.sender": "terra1..."}
Q = Dict[str, Any]


class BroadcastMode(str, Enum):
    """
    Controls how long the LCD holds the response after a broadcast.
    """
    SYNC = "sync"
    ASYNC = "async"
    BLOCK = "block"


class Coin(msgspec.Struct):
    denom: str
    amount: str


class DecCoin(msgspec.Struct):
    denom: str
    amount: str


class Msg(msgspec.Struct):
    """
    Amino-wrapped message, e.g. {"type": "bank/MsgSend", "value": {...}}.
    """
    type: str
    value: Dict[str, Any] = {}


class PubKey(msgspec.Struct):
    type: str
    value: str


class StdSignature(msgspec.Struct):
    signature: str
    pub_key: Optional[PubKey] = None


class StdFee(msgspec.Struct):
    amount: List[Coin] = []
    gas: str = "0"  # uint64, amino encodes it as a string


class StdTx(msgspec.Struct):
    msg: List[Msg]
    fee: StdFee
    signatures: List[StdSignature] = []
    memo: str = ""


class StdSignMsg(msgspec.Struct):
    chain_id: str
    account_number: str
    sequence: str
    fee: StdFee
    msgs: List[Msg]
    memo: str = ""


class Attribute(msgspec.Struct):
    key: str
    value: str = ""


class StringEvent(msgspec.Struct):
    type: str
    attributes: List[Attribute] = []


class ABCIMessageLog(msgspec.Struct):
    msg_index: int = 0
    log: str = ""
    events: List[StringEvent] = []


class TxResponse(msgspec.Struct):
    """
    Result of a broadcast or a tx lookup. Numeric fields arrive as strings
    from amino and are coerced by the non-strict decoder.
    """
    txhash: str = ""
    height: int = 0
    codespace: str = ""
    code: int = CODE_TYPE_OK
    data: str = ""
    raw_log: str = ""
    logs: Optional[List[ABCIMessageLog]] = None
    info: str = ""
    gas_wanted: int = 0
    gas_used: int = 0
    tx: Any = None
    timestamp: str = ""

    @property
    def ok(self) -> bool:
        return self.code == CODE_TYPE_OK


def parse_dec_coins(raw: str) -> List[DecCoin]:
    """
    Parses the node's coin string notation, "0.15uluna,0.1uusd".
    """
    coins: List[DecCoin] = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        match = DEC_COIN_PATTERN.match(part)
        if match is None:
            raise ValueError(f"invalid decimal coin expression: {part}")
        amount, denom = match.groups()
        coins.append(DecCoin(denom=denom, amount=amount))
    return coins
