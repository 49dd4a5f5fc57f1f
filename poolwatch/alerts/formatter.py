"""
Message Formatter
=================

Renders pools and tickers as chat messages.

- Telegram messages use legacy Markdown (*bold*, `code`, [text](url))
- Webhook chat services get plain text with the same numbers
- Long messages are split on line boundaries without losing characters
"""

from typing import List, Sequence, Tuple

from ..filters.pools import fee_tier_label
from ..models import AlphaTicker, PoolRecord

TELEGRAM_MAX_LENGTH = 4096

DIVIDER = "━━━━━━━━━━━━━━━━━━━━\n\n"

# (medium, high, hot) APR thresholds in percent
DEFAULT_APR_LEVELS = (50.0, 100.0, 200.0)

CHAINS = {
    56: ("🟡", "BSC"),
    8453: ("🔵", "Base"),
}
CHAIN_SLUGS = {
    "bsc": 56,
    "bsc-mainnet": 56,
    "base": 8453,
}

_MARKDOWN_SPECIAL = ("_", "*", "[", "`")


def escape_markdown(text: str) -> str:
    """Escape characters that break Telegram legacy Markdown."""
    for ch in _MARKDOWN_SPECIAL:
        text = text.replace(ch, "\\" + ch)
    return text


# =============================================================================
# Numbers
# =============================================================================

def format_apr(apr: float) -> str:
    """45.678 -> 45.68%, 150.2 -> 150.2%, 2500 -> 2500.00%"""
    if 100 <= apr < 1000:
        return f"{apr:.1f}%"
    return f"{apr:.2f}%"


def format_usd(value: float) -> str:
    """2_300_000 -> $2.30M, 12_500 -> $12.50K, 850 -> $850.00"""
    if value >= 1_000_000:
        return f"${value / 1_000_000:.2f}M"
    if value >= 1_000:
        return f"${value / 1_000:.2f}K"
    return f"${value:.2f}"


def format_price(p: float) -> str:
    if p >= 1000:
        return f"${p:,.0f}"
    if p >= 1:
        return f"${p:.2f}"
    return f"${p:.6f}"


def apr_emoji(apr: float, levels: Tuple[float, float, float] = DEFAULT_APR_LEVELS) -> str:
    medium, high, hot = levels
    if apr >= hot:
        return "🔥"
    if apr >= high:
        return "🟢"
    if apr >= medium:
        return "🟡"
    return "⚪"


def chain_label(record: PoolRecord) -> Tuple[str, str]:
    """(emoji, display name) for a pool's chain."""
    chain_id = record.chain_id or CHAIN_SLUGS.get(record.chain_name.lower(), 0)
    if chain_id in CHAINS:
        return CHAINS[chain_id]
    if record.chain_name:
        return "⚪", record.chain_name
    return "⚪", f"Chain {record.chain_id}"


def protocol_label(record: PoolRecord) -> str:
    is_v4 = "4" in record.version.lower()
    protocol = record.protocol.lower()
    if "uniswap" in protocol:
        return "🟢 Uniswap V4" if is_v4 else "🟠 Uniswap V3"
    if "pancake" in protocol:
        return "🟣 Pancake V4" if is_v4 else "🟡 Pancake V3"
    if "kyber" in protocol:
        return "🔵 KyberSwap V4" if is_v4 else "🟠 KyberSwap V3"
    version = "V4" if is_v4 else "V3"
    if not record.protocol:
        return f"🟢 {version}" if is_v4 else f"🟠 {version}"
    return f"{'🟢' if is_v4 else '🟠'} {record.protocol} {version}"


# =============================================================================
# Telegram (Markdown)
# =============================================================================

def format_pool_message(
    record: PoolRecord,
    levels: Tuple[float, float, float] = DEFAULT_APR_LEVELS,
) -> str:
    """One pool as a Telegram Markdown block (ends with a newline)."""
    emoji = apr_emoji(record.apr, levels)
    chain_emoji, chain_name = chain_label(record)

    info_line = escape_markdown(protocol_label(record))
    fee = fee_tier_label(record.fee_tier)
    if fee:
        info_line += f"    ⚪ Fee: {fee}"

    apr_text = format_apr(record.apr)
    if record.apr >= levels[2]:
        apr_text = f"*{apr_text}*"

    lines = [
        f"{emoji} *{escape_markdown(record.name)}*  {chain_emoji} {escape_markdown(chain_name)}",
        info_line,
        f"💱 *{escape_markdown(record.pair)}*",
        "",
        f"💰 *APR:*     {emoji} {apr_text}",
        f"💎 *TVL:*     {format_usd(record.tvl)}",
    ]
    if record.volume_24h > 0:
        lines.append(f"📈 *Volume:*  {format_usd(record.volume_24h)}")
    if record.fees_24h > 0:
        lines.append(f"💵 *Fees:*    {format_usd(record.fees_24h)}")
    if record.contract_address:
        lines.append(f"📋 CA: `{record.contract_address}`")
    if record.url:
        lines.append(f"🔗 [Details]({record.url})")
    return "\n".join(lines) + "\n"


def format_pools_message(
    records: Sequence[PoolRecord],
    is_first_run: bool,
    levels: Tuple[float, float, float] = DEFAULT_APR_LEVELS,
) -> str:
    """Banner plus numbered pool blocks separated by a divider."""
    if not records:
        return ""

    count = len(records)
    if is_first_run:
        banner = f"🎉 *First run | {count} pools*" if count > 1 else "🎉 *First run*"
    else:
        banner = f"✨ *{count} new pools found*" if count > 1 else "✨ *New pool found*"

    parts = [banner + "\n\n"]
    for i, record in enumerate(records, 1):
        parts.append(f"*[{i}]* " + format_pool_message(record, levels))
        if i < count:
            parts.append("\n" + DIVIDER)
    return "".join(parts)


# =============================================================================
# Webhook chat services (plain text)
# =============================================================================

def format_pools_plain(records: Sequence[PoolRecord]) -> str:
    if not records:
        return ""

    blocks = []
    for i, record in enumerate(records, 1):
        _, chain_name = chain_label(record)
        lines = [
            f"{i}. {record.name}",
            f"APR: {format_apr(record.apr)}",
            f"TVL: {format_usd(record.tvl)}",
            f"Pair: {record.token0_symbol} / {record.token1_symbol}",
            f"Chain: {chain_name}",
        ]
        if record.volume_24h > 0:
            lines.append(f"24h volume: {format_usd(record.volume_24h)}")
        if record.fees_24h > 0:
            lines.append(f"24h fees: {format_usd(record.fees_24h)}")
        if record.contract_address:
            lines.append(f"CA: {record.contract_address}")
        if record.url:
            lines.append(f"Details: {record.url}")
        blocks.append("\n".join(lines) + "\n")

    header = f"🎉 {len(records)} new pool{'s' if len(records) > 1 else ''} found\n\n"
    return header + "\n---\n\n".join(blocks)


# =============================================================================
# Alpha tickers
# =============================================================================

def _signed_pct(value: float) -> str:
    return f"{value:+.2f}%"


def format_alpha_message(
    new_listings: Sequence[AlphaTicker],
    big_movers: Sequence[AlphaTicker],
) -> str:
    """New USDT listings and big 24h movers; "" when both are empty."""
    if not new_listings and not big_movers:
        return ""

    lines = ["🚀 *Spot alpha*", ""]
    if new_listings:
        lines.append(f"🆕 *New listings ({len(new_listings)})*")
        for t in new_listings:
            lines.append(
                f"• *{escape_markdown(t.base_asset)}*  {format_price(t.last_price)}  "
                f"{_signed_pct(t.price_change_percent)}"
            )
        lines.append("")
    if big_movers:
        lines.append(f"📈 *Big movers ({len(big_movers)})*")
        for t in big_movers:
            arrow = "🟢" if t.price_change_percent >= 0 else "🔴"
            lines.append(
                f"{arrow} *{escape_markdown(t.base_asset)}*  {_signed_pct(t.price_change_percent)}  "
                f"{format_price(t.last_price)}  Vol {format_usd(t.quote_volume)}"
            )
        lines.append("")
    return "\n".join(lines)


# =============================================================================
# Splitting
# =============================================================================

def split_message(text: str, max_length: int = TELEGRAM_MAX_LENGTH) -> List[str]:
    """
    Split on line boundaries into chunks of at most max_length characters.

    Lines longer than max_length are cut into max_length pieces. Joining the
    chunks gives back the input exactly.
    """
    if max_length < 1:
        raise ValueError("max_length must be positive")
    if len(text) <= max_length:
        return [text] if text else []

    chunks = []
    current = ""
    for line in text.splitlines(keepends=True):
        while len(line) > max_length:
            if current:
                chunks.append(current)
                current = ""
            chunks.append(line[:max_length])
            line = line[max_length:]
        if len(current) + len(line) > max_length:
            chunks.append(current)
            current = ""
        current += line
    if current:
        chunks.append(current)
    return chunks
