"""Boundary sanitization for ranking pool entries from any provider."""

from fantasy_football_manager.domain.ranking import DEFAULT_MARKET_VALUE, POSITIONS, UNRANKED, RankingPoolEntry
from fantasy_football_manager.numeric import finite_or


def sanitize_entry(
    name: str | None,
    position: str | None,
    rank: object,
    market_value: object = None,
    team: str | None = None,
    age: object = None,
) -> RankingPoolEntry | None:
    """Build an entry, or return ``None`` for nameless or non-skill-position rows."""
    position = (position or "").strip().upper()
    name = (name or "").strip()
    if not name or position not in POSITIONS:
        return None
    value = finite_or(market_value, DEFAULT_MARKET_VALUE)  # type: ignore[arg-type]
    parsed_age = finite_or(age, 0.0)  # type: ignore[arg-type]
    return RankingPoolEntry(
        name=name,
        position=position,
        rank=finite_or(rank, UNRANKED),  # type: ignore[arg-type]
        market_value=value if value > 0 else DEFAULT_MARKET_VALUE,
        team=(team or "").strip().upper() or None,
        age=parsed_age if parsed_age > 0 else None,
    )
