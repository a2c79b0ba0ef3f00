"""Staking points lookups for seed tokens."""
import asyncio

from seedboard import config

POINT_FIELDS = ("points", "totalPoints", "stakingPoints")


def parse_points(data) -> int:
    """First non-null points field, as a non-negative int (0 if unusable)."""
    if not isinstance(data, dict):
        return 0
    for field in POINT_FIELDS:
        value = data.get(field)
        if value is not None:
            try:
                return max(0, int(float(value)))
            except (TypeError, ValueError):
                return 0
    return 0


async def fetch_points(session, token_id: str, nft_type: str) -> int:
    """Points for one token. 404 means not staked; every failure yields 0."""
    url = f"{config.STAKING_API_BASE}/seeds/points"
    params = {"id": token_id, "type": nft_type}
    try:
        async with session.get(url, params=params) as r:
            if r.status == 404:
                print(f"[Staking] No staking data for token {token_id} ({nft_type})")
                return 0
            if not r.ok:
                print(f"[Staking] HTTP {r.status} for token {token_id} ({nft_type})")
                return 0
            return parse_points(await r.json(content_type=None))
    except Exception as e:
        print(f"[Staking] Error for token {token_id} ({nft_type}): {e}")
        return 0


async def fetch_points_batch(session, token_ids: list, nft_type: str,
                             chunk_size: int = config.POINTS_CHUNK_SIZE) -> dict:
    """
    Points for many tokens, at most `chunk_size` requests in flight.

    Chunks run one after another; lookups inside a chunk run together.
    Every input id gets a key in the result.
    """
    points_by_id = {}
    unique_ids = list(dict.fromkeys(token_ids))

    for i in range(0, len(unique_ids), chunk_size):
        chunk = unique_ids[i:i + chunk_size]
        results = await asyncio.gather(
            *(fetch_points(session, token_id, nft_type) for token_id in chunk),
            return_exceptions=True,
        )
        for token_id, points in zip(chunk, results):
            points_by_id[token_id] = points if isinstance(points, int) else 0

    return points_by_id
