from dataclasses import dataclass


@dataclass(frozen=True)
class AlphaTicker:
    """24h spot ticker for a USDT-quoted pair."""
    symbol: str
    last_price: float
    price_change_percent: float
    quote_volume: float

    @property
    def base_asset(self) -> str:
        return self.symbol[:-4] if self.symbol.endswith("USDT") else self.symbol
