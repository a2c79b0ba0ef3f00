"""
Listing viewer helpers: prices, deal ratio and sorting of active listings.

Listings are the raw OpenSea listing dicts, annotated in place by
load_listings with tokenId, nftType, stakingPoints and cachedImageUrl.
"""
import asyncio

from seedboard import config, opensea
from seedboard.errors import InvalidApiKeyError, OpenSeaError

SORT_TYPES = ("lowestprice", "highestprice", "bestdeal")


def get_price_value(listing: dict) -> float:
    """Current price in ETH (wei / 1e18), 0 when missing."""
    try:
        return float(listing["price"]["current"]["value"]) / 1e18
    except (KeyError, TypeError, ValueError):
        return 0.0


def format_price(listing: dict) -> str:
    try:
        current = listing["price"]["current"]
        if not current.get("value"):
            return "Price not available"
        value = float(current["value"]) / 1e18
    except (KeyError, TypeError, AttributeError, ValueError):
        return "Price not available"
    return f"{value:.4f} {current.get('currency') or 'ETH'}"


def points_per_price(listing: dict) -> float:
    points = listing.get("stakingPoints") or 0
    price = get_price_value(listing)
    if price == 0 or points == 0:
        return 0.0
    return points / price


def get_opensea_url(listing: dict):
    token_id = opensea.get_token_id(listing)
    contract = opensea.get_contract(listing)
    if token_id and contract:
        return f"https://opensea.io/assets/ethereum/{contract}/{token_id}"
    return None


def sort_listings(listings: list, sort_type: str) -> list:
    if sort_type == "bestdeal":
        return sorted(listings, key=points_per_price, reverse=True)
    if sort_type == "highestprice":
        return sorted(listings, key=get_price_value, reverse=True)
    if sort_type == "lowestprice":
        return sorted(listings, key=get_price_value)
    return list(listings)


async def load_listings(session, nft_type: str, lookups) -> list:
    """Active listings for a seed type, annotated with points and image."""
    collection_slug = config.COLLECTION_SLUGS[nft_type]
    try:
        data = await opensea.fetch_listings_page(session, collection_slug)
    except OpenSeaError as e:
        if e.status == 401:
            raise InvalidApiKeyError(e.details) from e
        raise

    listings = data.get("listings") or []
    for listing in listings:
        listing["nftType"] = nft_type
        token_id = opensea.get_token_id(listing)
        if token_id:
            listing["tokenId"] = token_id

    async def annotate(listing):
        token_id = listing.get("tokenId")
        listing["stakingPoints"] = await lookups.points(session, token_id, nft_type) if token_id else 0
        listing["cachedImageUrl"] = await lookups.image_url(session, listing)

    for i in range(0, len(listings), config.POINTS_CHUNK_SIZE):
        await asyncio.gather(*(annotate(l) for l in listings[i:i + config.POINTS_CHUNK_SIZE]))

    print(f"[OpenSea] Loaded {len(listings)} listings for {nft_type}")
    return listings
