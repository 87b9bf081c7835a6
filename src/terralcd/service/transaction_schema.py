from typing import List, Optional

import msgspec

from terralcd.types import Q, TxResponse


class QueryTxRequest(msgspec.Struct):
    page: Optional[int] = None
    limit: Optional[int] = None
    query: Q = {}


class QueryTxResponse(msgspec.Struct):
    """
    Paged result of GET /txs. Counts are sdk.Int and come over as strings.
    """
    total_count: int = 0
    count: int = 0
    page_number: int = 0
    page_total: int = 0
    limit: int = 0
    txs: Optional[List[TxResponse]] = None  # null when nothing matched
