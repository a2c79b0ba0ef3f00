"""Ranking, search and totals over cached leaderboard entries."""
from typing import Optional

from seedboard.models import NFTType


def rank_entries(entries: list, descending: bool = True) -> list:
    """Sort by points and pair each entry with its 1-based rank: [(rank, entry), ...]."""
    ordered = sorted(entries, key=lambda e: e.points, reverse=descending)
    return list(enumerate(ordered, start=1))


def search_entries(ranked: list, query: str) -> list:
    query = (query or "").strip().lower()
    if not query:
        return ranked
    return [(rank, e) for rank, e in ranked if query in e.token_id.lower()]


def find_rank(ranked: list, query: str) -> Optional[int]:
    """Rank of the entry whose token id equals the query exactly."""
    query = (query or "").strip()
    if not query:
        return None
    for rank, e in ranked:
        if e.token_id == query:
            return rank
    return None


def summarize(entries: list) -> dict:
    totals = {
        "totalPoints": sum(e.points for e in entries),
        "count": len(entries),
    }
    for nft_type in NFTType:
        typed = [e for e in entries if NFTType(e.nft_type) is nft_type]
        key = nft_type.value.lower()
        totals[f"{key}Points"] = sum(e.points for e in typed)
        totals[f"{key}Count"] = len(typed)
    return totals
