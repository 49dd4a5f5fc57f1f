"""
Pool Normalizer
===============

Maps raw provider entities onto PoolRecord and applies the inclusion rules.

Steps:
1. Resolve every logical field through its alias list (first present,
   non-empty value wins; dotted paths reach into nested objects)
2. Collect constituent tokens (tokens[] / token0+token1 / baseToken+quoteToken)
3. Drop pools without a reference token or with a disallowed token
4. Derive APR when the provider does not supply it, normalize protocol
   names, pick the highlighted contract address and build the detail URL
"""

import logging
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from ..models import PoolRecord

logger = logging.getLogger(__name__)

# Alias lists in priority order
ID_KEYS = ("address", "id", "poolId", "pool_id", "pairAddress")
NAME_KEYS = ("name",)
APR_KEYS = ("apr", "apy", "allApr")
TVL_KEYS = ("tvl", "totalValueLocked", "liquidity.usd", "liquidity")
VOLUME_KEYS = ("volume24h", "volume24H", "volume.h24", "volume")
FEES_KEYS = ("fees24h", "fees24H", "earnFee", "fees")
CHAIN_ID_KEYS = ("chainId", "chain_id", "chain.id")
CHAIN_NAME_KEYS = ("chain.name", "chainName")
FEE_TIER_KEYS = ("feeTier", "fee_tier", "fee")
PROTOCOL_KEYS = ("exchange", "protocol", "protocolName", "dexId")
VERSION_KEYS = ("version", "poolVersion")
URL_KEYS = ("url",)

KYBERSWAP_POOL_URL = "https://kyberswap.com/earn/pools/{id}"

# exchange id substring -> (protocol, version)
EXCHANGE_PROTOCOLS = (
    (("uniswap-v4", "uniswapv4"), ("Uniswap", "v4")),
    (("uniswap-v3", "uniswapv3"), ("Uniswap", "v3")),
    (("pancake-v3", "pancakev3"), ("Pancake", "v3")),
    (("pancake-infinity",), ("Pancake", "v3")),
    (("kyber",), ("KyberSwap", "")),
)

Token = Tuple[str, str]  # (address, symbol)


# =============================================================================
# Field helpers
# =============================================================================

def lookup(raw: Any, path: str) -> Any:
    """Resolve a dotted path ("liquidity.usd") in nested dicts."""
    value = raw
    for part in path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


def first_value(raw: dict, keys: Sequence[str]) -> Any:
    """First alias whose value is present and non-empty."""
    for key in keys:
        value = lookup(raw, key)
        if value is None or value == "" or isinstance(value, (dict, list)):
            continue
        return value
    return None


def to_float(value: Any) -> Optional[float]:
    """Parse a number or numeric string; None if not numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def first_float(raw: dict, keys: Sequence[str]) -> Optional[float]:
    for key in keys:
        number = to_float(lookup(raw, key))
        if number is not None:
            return number
    return None


def extract_id(raw: Any) -> Optional[str]:
    """Pool identifier; numeric ids are rendered without decimals."""
    if not isinstance(raw, dict):
        return None
    value = first_value(raw, ID_KEYS)
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        return f"{value:.0f}"
    return str(value).strip() or None


def extract_tokens(raw: dict) -> List[Token]:
    """Constituent tokens as (address, symbol) pairs, in provider order."""
    if isinstance(raw.get("tokens"), list):
        items = raw["tokens"]
    else:
        items = [raw.get("token0"), raw.get("token1")]
        if not any(isinstance(item, dict) for item in items):
            items = [raw.get("baseToken"), raw.get("quoteToken")]

    tokens = []
    for item in items:
        if not isinstance(item, dict):
            continue
        symbol = str(item.get("symbol") or "").strip()
        address = str(item.get("address") or item.get("id") or "").strip()
        if symbol:
            tokens.append((address, symbol))
    return tokens


def normalize_protocol(exchange: str) -> Tuple[str, str]:
    """Map a provider exchange id onto (protocol, version)."""
    lowered = exchange.lower()
    for markers, result in EXCHANGE_PROTOCOLS:
        if any(marker in lowered for marker in markers):
            return result
    return exchange, ""


def infer_version(*hints: str) -> str:
    joined = " ".join(h.lower() for h in hints if h)
    if "v4" in joined:
        return "v4"
    return "v3"


def compute_apr(fees_24h: float, tvl: float) -> float:
    """Annualized fee yield in percent: fees / TVL * 365 * 100."""
    if tvl <= 0:
        return 0.0
    return fees_24h / tvl * 365 * 100


def fee_tier_label(fee_tier: float) -> str:
    """
    Display label for a fee tier.

    Values near 0.01 and 1.0 are the coded low/high tiers; anything else is
    shown as given. 0 means unknown.
    """
    if not fee_tier:
        return ""
    if 0.009 <= fee_tier <= 0.011:
        return "0.01%"
    if 0.99 <= fee_tier <= 1.01:
        return "1%"
    return f"{fee_tier:g}%"


# =============================================================================
# Normalizer
# =============================================================================

class PoolNormalizer:
    """
    Turns raw provider entities into PoolRecords.

    Args:
        reference_symbols: at least one token must be one of these
        disallowed_symbols: no token may be one of these
    """

    def __init__(
        self,
        reference_symbols: Iterable[str] = ("USDT", "USDC"),
        disallowed_symbols: Iterable[str] = ("WETH",),
    ):
        self.reference_symbols = {s.strip().lower() for s in reference_symbols if s.strip()}
        self.disallowed_symbols = {s.strip().lower() for s in disallowed_symbols if s.strip()}

    def passes_filter(self, tokens: Sequence[Token]) -> bool:
        """Token inclusion rules."""
        if len(tokens) < 2:
            return False
        symbols = [symbol.lower() for _, symbol in tokens]
        if any(symbol in self.disallowed_symbols for symbol in symbols):
            return False
        return any(symbol in self.reference_symbols for symbol in symbols)

    def is_reference(self, symbol: str) -> bool:
        return symbol.lower() in self.reference_symbols

    def contract_address(self, tokens: Sequence[Token]) -> str:
        """Address of the first token that is not a reference token."""
        for address, symbol in tokens:
            if not self.is_reference(symbol):
                return address
        return ""

    def normalize(
        self,
        raw: Any,
        source: str = "",
        url_template: str = KYBERSWAP_POOL_URL,
    ) -> Optional[PoolRecord]:
        """
        Normalize one raw entity.

        Returns:
            PoolRecord, or None when the entity has no id or fails the
            inclusion rules.
        """
        pool_id = extract_id(raw)
        if pool_id is None:
            return None

        tokens = extract_tokens(raw)
        if not self.passes_filter(tokens):
            logger.debug(f"Filtered out {pool_id}: tokens {[s for _, s in tokens]}")
            return None

        (token0, symbol0), (token1, symbol1) = tokens[0], tokens[1]

        name = first_value(raw, NAME_KEYS)
        name = str(name) if name is not None else f"{symbol0}/{symbol1}"

        tvl = first_float(raw, TVL_KEYS) or 0.0
        volume = first_float(raw, VOLUME_KEYS) or 0.0
        fees = first_float(raw, FEES_KEYS) or 0.0
        apr = first_float(raw, APR_KEYS)
        if apr is None:
            apr = compute_apr(fees, tvl)

        chain_id, chain_name = self._chain(raw)

        exchange = first_value(raw, PROTOCOL_KEYS)
        protocol, version = normalize_protocol(str(exchange)) if exchange is not None else ("", "")
        explicit_version = first_value(raw, VERSION_KEYS)
        if explicit_version is not None:
            version = str(explicit_version).lower()
        elif not version:
            version = infer_version(pool_id, name, str(exchange or ""))

        url = first_value(raw, URL_KEYS)
        if url is None:
            url = url_template.format(id=pool_id) if url_template else ""

        return PoolRecord(
            id=pool_id,
            name=name,
            token0=token0,
            token1=token1,
            token0_symbol=symbol0,
            token1_symbol=symbol1,
            tvl=tvl,
            volume_24h=volume,
            fees_24h=fees,
            apr=apr,
            fee_tier=first_float(raw, FEE_TIER_KEYS) or 0.0,
            protocol=protocol,
            version=version,
            chain_id=chain_id,
            chain_name=chain_name,
            contract_address=self.contract_address(tokens),
            url=str(url),
            source=source,
        )

    def normalize_all(
        self,
        raws: Iterable[Any],
        source: str = "",
        url_template: str = KYBERSWAP_POOL_URL,
    ) -> List[PoolRecord]:
        """Normalize many entities, dropping filtered ones and duplicate ids."""
        records = []
        seen = set()
        for raw in raws:
            record = self.normalize(raw, source=source, url_template=url_template)
            if record is None or record.id in seen:
                continue
            seen.add(record.id)
            records.append(record)
        return records

    @staticmethod
    def _chain(raw: dict) -> Tuple[int, str]:
        """(numeric chain id, chain name); either may be empty."""
        chain_id = 0
        chain_name = ""
        for key in CHAIN_ID_KEYS:
            value = lookup(raw, key)
            number = to_float(value)
            if number is not None:
                chain_id = int(number)
                break
            if isinstance(value, str) and value.strip() and not chain_name:
                # DexScreener uses slugs ("bsc") as chainId
                chain_name = value.strip()
        name = first_value(raw, CHAIN_NAME_KEYS)
        if name is not None:
            chain_name = str(name)
        return chain_id, chain_name
