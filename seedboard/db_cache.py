"""
Supabase cache for the seed leaderboard.
Holds the computed leaderboard rows and the single refresh-status row.
"""
import time
from typing import Optional

from seedboard import config
from seedboard.models import LeaderboardEntry, RefreshState

_client = None

# Sentinel so set_status can tell "leave last_error alone" from "clear it"
_UNSET = object()


def get_client():
    """Lazy-load Supabase client."""
    global _client
    if _client is None:
        if not config.SUPABASE_URL or not config.SUPABASE_KEY:
            return None
        from supabase import create_client
        _client = create_client(config.SUPABASE_URL, config.SUPABASE_KEY)
    return _client


def is_cache_enabled() -> bool:
    """Check if Supabase caching is configured."""
    return bool(config.SUPABASE_URL and config.SUPABASE_KEY)


def utc_now() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


def upsert_entries(entries: list, batch_size: int = config.UPSERT_BATCH_SIZE) -> int:
    """
    Upsert leaderboard rows keyed on (collection_slug, token_id).

    A failing batch is reported and skipped; the remaining batches are
    still written. Returns the number of rows written.
    """
    client = get_client()
    if not client or not entries:
        return 0

    records = [e.to_row() if isinstance(e, LeaderboardEntry) else e for e in entries]
    written = 0
    for i in range(0, len(records), batch_size):
        batch = records[i:i + batch_size]
        try:
            client.table(config.ENTRIES_TABLE).upsert(batch, on_conflict="collection_slug,token_id").execute()
            written += len(batch)
        except Exception as e:
            print(f"[Cache] Upsert error batch {i}: {e}")

    print(f"[Cache] Saved {written}/{len(records)} leaderboard entries")
    return written


def set_status(status, started_at: Optional[str] = None, completed_at: Optional[str] = None,
               error=_UNSET):
    """Upsert the refresh-status row. Columns left as None/unset are not touched."""
    client = get_client()
    if not client:
        return

    record = {"cache_key": config.CACHE_KEY, "status": RefreshState(status).value}
    if started_at is not None:
        record["last_started_at"] = started_at
    if completed_at is not None:
        record["last_completed_at"] = completed_at
    if error is not _UNSET:
        record["last_error"] = error

    try:
        client.table(config.META_TABLE).upsert(record, on_conflict="cache_key").execute()
    except Exception as e:
        print(f"[Cache] Error saving refresh status: {e}")


def get_status() -> Optional[dict]:
    """The refresh-status row, or None."""
    client = get_client()
    if not client:
        return None
    try:
        result = client.table(config.META_TABLE).select("*").eq("cache_key", config.CACHE_KEY).execute()
        return result.data[0] if result.data else None
    except Exception as e:
        print(f"[Cache] Error getting refresh status: {e}")
        return None


def get_entries(nft_type: Optional[str] = None) -> list:
    """Fetch all cached leaderboard rows with pagination, optionally for one NFT type."""
    client = get_client()
    if not client:
        return []
    try:
        all_rows = []
        offset = 0
        limit = 1000
        while True:
            query = client.table(config.ENTRIES_TABLE).select("*")
            if nft_type:
                query = query.eq("nft_type", nft_type)
            result = query.order("points", desc=True).range(offset, offset + limit - 1).execute()
            if not result.data:
                break
            all_rows.extend(result.data)
            if len(result.data) < limit:
                break
            offset += limit
        return [LeaderboardEntry.from_row(row) for row in all_rows]
    except Exception as e:
        print(f"[Cache] Error getting leaderboard entries: {e}")
        return []
