"""
PoolRecord - canonical liquidity pool entity produced by normalization.
"""

from dataclasses import asdict, dataclass, fields
from typing import Any, Dict


@dataclass(frozen=True)
class PoolRecord:
    """A liquidity pool as announced to chat recipients."""
    id: str
    name: str
    token0: str                # token addresses
    token1: str
    token0_symbol: str
    token1_symbol: str
    tvl: float = 0.0
    volume_24h: float = 0.0
    fees_24h: float = 0.0
    apr: float = 0.0           # percent
    fee_tier: float = 0.0      # percent, 0 = unknown
    protocol: str = ""         # "Uniswap", "Pancake", "KyberSwap", ...
    version: str = ""          # "v3" / "v4"
    chain_id: int = 0
    chain_name: str = ""
    contract_address: str = ""  # first non-reference token
    url: str = ""
    source: str = ""

    @property
    def pair(self) -> str:
        return f"{self.token0_symbol}/{self.token1_symbol}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for JSON storage."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PoolRecord":
        """Rebuild from a stored dict, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})
