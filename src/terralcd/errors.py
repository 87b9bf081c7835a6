from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from terralcd.types import TxResponse


class TerraLCDError(Exception):
    """Base class for everything raised by terralcd."""


class LCDTransportError(TerraLCDError):
    """The request never produced a response (DNS, connect, timeout...)."""


class LCDResponseError(TerraLCDError):
    def __init__(self, status_code: int, message: str):
        super().__init__(f"lcd responded {status_code}: {message}")
        self.status_code = status_code
        self.message = message


class LCDDecodeError(TerraLCDError):
    pass


class LCDEncodeError(TerraLCDError):
    pass


class TransactionServiceError(TerraLCDError):
    pass


class BroadcastError(TransactionServiceError):
    """
    The node accepted the request but rejected the transaction
    (non-zero ABCI code). The decoded response is kept for inspection.
    """

    def __init__(self, message: str, response: Optional["TxResponse"] = None):
        super().__init__(message)
        self.response = response
