import asyncio
import logging
from typing import Any, Dict, Optional, Type, TypeVar

import httpx
import msgspec

from terralcd.configs.lcd_config import LCDConfig
from terralcd.errors import (
    LCDDecodeError,
    LCDEncodeError,
    LCDResponseError,
    LCDTransportError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RequestPayload(msgspec.Struct):
    """
    A single LCD call: method and path relative to the LCD root, optional
    query string and an already-encoded JSON body.
    """
    method: str
    path: str
    query: Optional[Dict[str, str]] = None
    body: Optional[bytes] = None


class LCDErrorBody(msgspec.Struct):
    error: str = ""


class LCDClient:
    """
    Persistent HTTP client for the LCD REST API with msgspec decoding.
    An injected httpx client must carry the LCD root as its base_url.
    """

    def __init__(self, config: LCDConfig, client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self.client = client or httpx.AsyncClient(base_url=config.lcd_url, timeout=config.timeout)
        self.semaphore = asyncio.Semaphore(config.max_concurrency)

    async def __aenter__(self) -> "LCDClient":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    def encode(self, obj: Any) -> bytes:
        try:
            return msgspec.json.encode(obj)
        except (TypeError, msgspec.EncodeError) as e:
            raise LCDEncodeError(str(e)) from e

    async def request_json(self, payload: RequestPayload, type: Type[T]) -> T:
        """
        Executes the call and decodes the JSON response into `type`.
        """
        headers = {"Accept": "application/json"}
        if payload.body is not None:
            headers["Content-Type"] = "application/json"

        logger.debug("%s %s query=%s", payload.method, payload.path, payload.query)
        async with self.semaphore:
            try:
                resp = await self.client.request(
                    payload.method,
                    payload.path,
                    params=payload.query,
                    content=payload.body,
                    headers=headers,
                )
            except httpx.HTTPError as e:
                logger.warning("%s %s failed: %s", payload.method, payload.path, e)
                raise LCDTransportError(f"{payload.method} {payload.path}: {e}") from e

        if not resp.is_success:
            message = _error_message(resp)
            logger.warning("%s %s returned %d: %s", payload.method, payload.path, resp.status_code, message)
            raise LCDResponseError(resp.status_code, message)

        try:
            return msgspec.json.decode(resp.content, type=type, strict=False)
        except msgspec.DecodeError as e:
            logger.warning("%s %s undecodable body: %s", payload.method, payload.path, e)
            raise LCDDecodeError(f"decode {payload.path}: {e}") from e


def _error_message(resp: httpx.Response) -> str:
    # the LCD reports failures as {"error": "..."}
    try:
        body = msgspec.json.decode(resp.content, type=LCDErrorBody)
    except msgspec.DecodeError:
        return resp.text
    return body.error or resp.text
