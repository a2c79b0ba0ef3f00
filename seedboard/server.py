"""
HTTP functions for the leaderboard page.

POST /opensea-listings     proxy one page of OpenSea listings for a collection
POST /leaderboard-refresh  run the refresh job
GET  /leaderboard          cached rows, ranked, with search and totals
GET  /leaderboard/status   refresh status row
"""
import asyncio

import aiohttp
from aiohttp import web

from seedboard import db_cache, leaderboard, opensea
from seedboard.errors import OpenSeaError
from seedboard.models import NFTType, RefreshStatus
from seedboard.refresh import LeaderboardRefresher

HTTP_SESSION = web.AppKey("http_session", aiohttp.ClientSession)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
}


@web.middleware
async def cors_middleware(request: web.Request, handler):
    if request.method == "OPTIONS":
        response: web.StreamResponse = web.Response(status=204)
    else:
        try:
            response = await handler(request)
        except web.HTTPException as ex:
            response = ex
    response.headers.update(CORS_HEADERS)
    return response


async def opensea_listings_handler(request: web.Request) -> web.Response:
    try:
        payload = await request.json()
    except Exception:
        payload = None
    collection_slug = payload.get("collectionSlug") if isinstance(payload, dict) else None

    if not collection_slug:
        print("[Server] Missing collectionSlug parameter")
        return web.json_response({"error": "Collection slug is required"}, status=400)

    print(f"[Server] Fetching listings for: {collection_slug}")
    try:
        data = await opensea.fetch_listings_page(request.app[HTTP_SESSION], collection_slug)
    except OpenSeaError as e:
        print(f"[Server] OpenSea API error: {e.status} {e.details[:200]}")
        return web.json_response({"error": str(e), "details": e.details}, status=e.status)
    except Exception as e:
        print(f"[Server] Error fetching listings: {e}")
        return web.json_response({"error": str(e) or type(e).__name__}, status=500)

    listings = data.get("listings") or []
    print(f"[Server] Found {len(listings)} listings")
    return web.json_response({"listings": listings})


async def leaderboard_refresh_handler(request: web.Request) -> web.Response:
    result = await LeaderboardRefresher().run(request.app[HTTP_SESSION])
    return web.json_response(result, status=500 if "error" in result else 200)


async def leaderboard_handler(request: web.Request) -> web.Response:
    nft_type = request.query.get("type")
    if nft_type and nft_type not in {t.value for t in NFTType}:
        return web.json_response({"error": f"Unknown type: {nft_type}"}, status=400)
    query = request.query.get("q", "")
    descending = request.query.get("order", "desc") != "asc"

    entries = await asyncio.to_thread(db_cache.get_entries, nft_type or None)
    status = await asyncio.to_thread(db_cache.get_status)
    ranked = leaderboard.rank_entries(entries, descending=descending)
    rows = []
    for rank, entry in leaderboard.search_entries(ranked, query):
        row = entry.to_row()
        row["rank"] = rank
        rows.append(row)

    return web.json_response({
        "entries": rows,
        "totals": leaderboard.summarize(entries),
        "searchRank": leaderboard.find_rank(ranked, query),
        "status": RefreshStatus.from_row(status).to_dict(),
    })


async def status_handler(request: web.Request) -> web.Response:
    status = await asyncio.to_thread(db_cache.get_status)
    return web.json_response(RefreshStatus.from_row(status).to_dict())


def create_app(session=None) -> web.Application:
    """Build the app. Without a session one aiohttp ClientSession lives for the app's lifetime."""
    app = web.Application(middlewares=[cors_middleware])

    if session is not None:
        app[HTTP_SESSION] = session
    else:
        async def http_session_ctx(app):
            async with aiohttp.ClientSession(connector=aiohttp.TCPConnector(limit=50)) as s:
                app[HTTP_SESSION] = s
                yield
        app.cleanup_ctx.append(http_session_ctx)

    app.router.add_post("/opensea-listings", opensea_listings_handler)
    app.router.add_post("/leaderboard-refresh", leaderboard_refresh_handler)
    app.router.add_get("/leaderboard", leaderboard_handler)
    app.router.add_get("/leaderboard/status", status_handler)
    return app
