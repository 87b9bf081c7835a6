import os

import msgspec

DEFAULT_LCD_URL = "http://localhost:1317"


class LCDConfig(msgspec.Struct):
    lcd_url: str
    timeout: float = 30.0
    max_concurrency: int = 20
    broadcast_wait: float = 1.0
    chain_id: str = ""

    def __post_init__(self):
        if "${TERRA_LCD_API_KEY}" in self.lcd_url:
            key = os.getenv("TERRA_LCD_API_KEY", "missing_key")
            self.lcd_url = self.lcd_url.replace("${TERRA_LCD_API_KEY}", key)
        self.lcd_url = self.lcd_url.rstrip("/")
        if self.max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")

    @classmethod
    def from_env(cls) -> "LCDConfig":
        """Builds a config from TERRA_LCD_* / TERRA_CHAIN_ID variables."""
        return cls(
            lcd_url=os.getenv("TERRA_LCD_URL", DEFAULT_LCD_URL),
            timeout=float(os.getenv("TERRA_LCD_TIMEOUT", "30.0")),
            chain_id=os.getenv("TERRA_CHAIN_ID", ""),
        )
