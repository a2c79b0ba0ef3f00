"""
Per-process lookup cache for the listing viewer.

Image URLs and staking points are cached with a TTL; concurrent image
lookups for the same token share one in-flight task.
"""
import asyncio
import time
from urllib.parse import quote

from seedboard import config, opensea, staking

PLACEHOLDER_URL = "https://via.placeholder.com/300x300/667eea/ffffff?text={}"


def placeholder_image(text: str) -> str:
    return PLACEHOLDER_URL.format(quote(text))


class LookupCache:
    def __init__(self, ttl: float = config.LOOKUP_TTL, clock=time.monotonic):
        self.ttl = ttl
        self.clock = clock
        self._images = {}
        self._points = {}
        self._pending = {}
        self.hits = 0
        self.misses = 0

    def _get(self, store: dict, key):
        item = store.get(key)
        if item is None:
            self.misses += 1
            return None
        value, expires_at = item
        if self.clock() >= expires_at:
            del store[key]
            self.misses += 1
            return None
        self.hits += 1
        return value

    def _put(self, store: dict, key, value):
        store[key] = (value, self.clock() + self.ttl)
        return value

    def clear(self):
        self._images.clear()
        self._points.clear()

    async def points(self, session, token_id: str, nft_type: str) -> int:
        key = f"{nft_type}_{token_id}"
        cached = self._get(self._points, key)
        if cached is not None:
            return cached
        return self._put(self._points, key, await staking.fetch_points(session, token_id, nft_type))

    async def image_url(self, session, listing: dict) -> str:
        token_id = opensea.get_token_id(listing)
        if not token_id:
            return placeholder_image("No ID")

        cached = self._get(self._images, token_id)
        if cached is not None:
            return cached

        pending = self._pending.get(token_id)
        if pending is not None:
            return await pending

        offer = opensea.first_offer(listing) or {}
        if offer.get("imageUrl"):
            return self._put(self._images, token_id, offer["imageUrl"])

        contract = opensea.get_contract(listing)
        if not contract:
            return placeholder_image("No Contract")

        task = asyncio.ensure_future(self._lookup_image(session, contract, token_id))
        self._pending[token_id] = task
        try:
            return await task
        finally:
            if self._pending.get(token_id) is task:
                del self._pending[token_id]

    async def _lookup_image(self, session, contract: str, token_id: str) -> str:
        nft = await opensea.fetch_nft(session, contract, token_id)
        image = None
        if nft:
            image = nft.get("image_url") or nft.get("display_image_url")
        if not image:
            image = placeholder_image(f"NFT #{token_id}")
        return self._put(self._images, token_id, image)
