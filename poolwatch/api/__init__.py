from .base import BaseSourceClient
from .kyberswap import KyberSwapClient
from .dexscreener import DexScreenerClient
from .binance import BinanceTickerClient
from .fallback import SourceChain

__all__ = [
    "BaseSourceClient",
    "KyberSwapClient",
    "DexScreenerClient",
    "BinanceTickerClient",
    "SourceChain",
]
