import httpx
import pytest

from terralcd.configs.lcd_config import LCDConfig
from terralcd.httpclient import LCDClient
from terralcd.service.transaction import LCDTransactionService


@pytest.fixture
def url() -> str:
    """Shared LCD URL for all client tests."""
    return "http://lcd.mock"


@pytest.fixture
def config(url: str) -> LCDConfig:
    return LCDConfig(lcd_url=url, broadcast_wait=0.0, chain_id="columbus-4")


@pytest.fixture
async def client(config: LCDConfig):
    """
    Yields a client and ensures the persistent httpx client is closed after the test.
    """
    c = LCDClient(config, client=httpx.AsyncClient(base_url=config.lcd_url))
    yield c
    await c.aclose()


@pytest.fixture
def service(client: LCDClient, config: LCDConfig) -> LCDTransactionService:
    return LCDTransactionService(client, config)
