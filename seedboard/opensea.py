"""
OpenSea v2 client for the seed collections.

Paging helpers never raise for HTTP or network trouble: they print the
failure, stop paging and hand back whatever pages already arrived.
"""
from typing import Optional
import aiohttp

from seedboard import config
from seedboard.errors import OpenSeaError
from seedboard.models import NFTItem


def _headers() -> dict:
    return {"Accept": "application/json", "X-API-KEY": config.OPENSEA_API_KEY}


def get_token_id(listing: dict) -> Optional[str]:
    """Offered token id of a listing (protocol_data.parameters.offer[0])."""
    offer = first_offer(listing)
    token_id = offer.get("identifierOrCriteria") if offer else None
    return str(token_id) if token_id else None


def get_contract(listing: dict) -> Optional[str]:
    offer = first_offer(listing)
    return offer.get("token") if offer else None


def first_offer(listing: dict) -> Optional[dict]:
    try:
        offers = listing["protocol_data"]["parameters"]["offer"]
        return offers[0] if offers else None
    except (KeyError, TypeError, IndexError):
        return None


async def fetch_all_nfts(session, collection_slug: str, page_size: int = config.NFT_PAGE_SIZE,
                         max_pages: int = config.NFT_MAX_PAGES) -> list:
    """Fetch every NFT of a collection, following the `next` cursor."""
    all_nfts = []
    cursor = None
    page = 0
    url = f"{config.OPENSEA_API_BASE}/collection/{collection_slug}/nfts"

    while True:
        page += 1
        params = {"limit": page_size}
        if cursor:
            params["next"] = cursor

        try:
            async with session.get(url, params=params, headers=_headers()) as r:
                if not r.ok:
                    print(f"[OpenSea] NFT page {page} for {collection_slug} failed: {r.status}")
                    break
                data = await r.json()
        except Exception as e:
            print(f"[OpenSea] NFT page {page} for {collection_slug} error: {e}")
            break

        if not isinstance(data, dict):
            print(f"[OpenSea] NFT page {page} for {collection_slug}: unexpected body {type(data).__name__}")
            break

        nfts = data.get("nfts")
        for nft in nfts if isinstance(nfts, list) else []:
            if isinstance(nft, dict):
                all_nfts.append(NFTItem.from_api(nft))

        cursor = data.get("next") or None
        if not cursor or page >= max_pages:
            break

    print(f"[OpenSea] Fetched {len(all_nfts)} NFTs for {collection_slug} ({page} pages)")
    return all_nfts


async def fetch_listings_page(session, collection_slug: str, cursor: Optional[str] = None) -> dict:
    """One page of active listings. Raises OpenSeaError on a non-2xx response or a non-object body."""
    url = f"{config.OPENSEA_API_BASE}/listings/collection/{collection_slug}/all"
    params = {"next": cursor} if cursor else None
    async with session.get(url, params=params, headers=_headers()) as r:
        if not r.ok:
            raise OpenSeaError(r.status, await r.text())
        data = await r.json()
    if not isinstance(data, dict):
        raise OpenSeaError(502, f"unexpected listings body: {type(data).__name__}")
    return data


async def fetch_listed_token_ids(session, collection_slug: str,
                                 max_pages: int = config.LISTING_MAX_PAGES) -> set:
    """Token ids with an active listing. Keeps earlier pages if a later one fails."""
    listed_ids = set()
    cursor = None
    page = 0

    while True:
        page += 1
        try:
            data = await fetch_listings_page(session, collection_slug, cursor)
        except OpenSeaError as e:
            print(f"[OpenSea] Listings page {page} for {collection_slug} failed: {e.status}")
            break
        except Exception as e:
            print(f"[OpenSea] Listings page {page} for {collection_slug} error: {e}")
            break

        listings = data.get("listings")
        for listing in listings if isinstance(listings, list) else []:
            token_id = get_token_id(listing)
            if token_id:
                listed_ids.add(token_id)

        cursor = data.get("next") or None
        if not cursor or page >= max_pages:
            break

    print(f"[OpenSea] Found {len(listed_ids)} listed NFTs for {collection_slug}")
    return listed_ids


async def fetch_nft(session, contract: str, token_id: str, timeout: float = config.IMAGE_TIMEOUT) -> Optional[dict]:
    """Single NFT by contract address and token id, or None."""
    url = f"{config.OPENSEA_API_BASE}/chain/ethereum/contract/{contract}/nfts/{token_id}"
    try:
        async with session.get(url, headers=_headers(),
                               timeout=aiohttp.ClientTimeout(total=timeout)) as r:
            if not r.ok:
                return None
            data = await r.json()
            return data.get("nft") if isinstance(data, dict) else None
    except Exception as e:
        print(f"[OpenSea] NFT lookup failed for token {token_id}: {e}")
        return None
