"""
Leaderboard refresh job.

Walks the tracked collections one at a time: NFTs, listed ids, staking
points, then a batched upsert into the cache table. The status row in
leaderboard_meta moves running -> idle on success, running -> error on any
exception. Rows already written for earlier collections are kept.
"""
import asyncio
import time
import aiohttp

from seedboard import config, db_cache, opensea, staking
from seedboard.models import LeaderboardEntry, NFTType, RefreshState


def build_entries(collection_slug: str, nft_type, nfts: list, listed_ids: set, points_by_id: dict) -> list:
    """Merge NFT metadata, points and listing membership into entries (one per token id)."""
    entries = {}
    for nft in nfts:
        if not nft.identifier:
            continue
        entries[nft.identifier] = LeaderboardEntry(
            collection_slug=collection_slug,
            nft_type=NFTType(nft_type),
            token_id=nft.identifier,
            points=points_by_id.get(nft.identifier, 0),
            image_url=nft.image_url,
            opensea_url=nft.opensea_url,
            is_listed=nft.identifier in listed_ids,
        )
    return list(entries.values())


class LeaderboardRefresher:
    def __init__(self, collections: dict = None):
        self.collections = dict(collections or config.COLLECTION_SLUGS)
        self.collections_done = 0
        self.entries_written = 0
        self.start_time = None

    async def refresh_collection(self, session, nft_type: str, collection_slug: str) -> int:
        print(f"[Refresh] Processing {nft_type} ({collection_slug})...")
        nfts = await opensea.fetch_all_nfts(session, collection_slug)
        listed_ids = await opensea.fetch_listed_token_ids(session, collection_slug)
        token_ids = [n.identifier for n in nfts if n.identifier]

        print(f"[Refresh] Fetching points for {len(token_ids)} {nft_type} NFTs...")
        points_by_id = await staking.fetch_points_batch(session, token_ids, nft_type)

        entries = build_entries(collection_slug, nft_type, nfts, listed_ids, points_by_id)
        written = await asyncio.to_thread(db_cache.upsert_entries, entries)
        print(f"[Refresh] Saved {written} {nft_type} entries")
        return written

    async def run(self, session=None) -> dict:
        """Run one refresh. Returns {"success": True} or {"error": ...}."""
        self.start_time = time.time()
        self.collections_done = 0
        self.entries_written = 0
        if not db_cache.is_cache_enabled():
            print("[Refresh] Cache not configured (SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY), nothing to refresh into")
            return {"error": "Refresh failed"}
        await asyncio.to_thread(db_cache.set_status, RefreshState.RUNNING, started_at=db_cache.utc_now())

        try:
            print("[Refresh] Starting leaderboard refresh...")
            if session is None:
                connector = aiohttp.TCPConnector(limit=config.POINTS_CHUNK_SIZE * 2)
                async with aiohttp.ClientSession(connector=connector) as own_session:
                    await self._refresh_all(own_session)
            else:
                await self._refresh_all(session)
        except Exception as e:
            print(f"[Refresh] Error: {type(e).__name__}: {e}")
            await asyncio.to_thread(db_cache.set_status, RefreshState.ERROR, error=str(e) or type(e).__name__)
            return {"error": "Refresh failed"}

        await asyncio.to_thread(db_cache.set_status, RefreshState.IDLE, completed_at=db_cache.utc_now(), error=None)
        elapsed = time.time() - self.start_time
        print(f"[Refresh] Completed {self.collections_done} collections, "
              f"{self.entries_written} entries in {elapsed:.1f}s")
        return {"success": True}

    async def _refresh_all(self, session):
        for nft_type, collection_slug in self.collections.items():
            self.entries_written += await self.refresh_collection(session, nft_type, collection_slug)
            self.collections_done += 1


async def refresh_leaderboard(session=None) -> dict:
    return await LeaderboardRefresher().run(session)
