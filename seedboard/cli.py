"""
Command line entry for the seed leaderboard.
Run with: python run.py <command> [options]
"""
import argparse
import asyncio
import sys
from pathlib import Path

import aiohttp
import pandas as pd
import requests
from aiohttp import web
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter

from seedboard import config, db_cache, leaderboard
from seedboard.listings import SORT_TYPES, format_price, get_opensea_url, load_listings, points_per_price, sort_listings
from seedboard.lookups import LookupCache
from seedboard.models import NFTType
from seedboard.refresh import LeaderboardRefresher
from seedboard.server import create_app

DEFAULT_OUTPUT_FILE = config.ROOT_DIR / "output" / "leaderboard.xlsx"
HEADER_FILL = PatternFill(start_color="667EEA", end_color="667EEA", fill_type="solid")


def print_cache_status():
    if db_cache.is_cache_enabled():
        print("Cache: ENABLED (Supabase)")
    else:
        print("Cache: NOT CONFIGURED (set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY in .env)")
    if not config.OPENSEA_API_KEY:
        print("OpenSea: OPENSEA_API_KEY not set, requests will be rejected")


def cmd_serve(args):
    print_cache_status()
    print(f"Serving on http://{args.host}:{args.port}")
    web.run_app(create_app(), host=args.host, port=args.port, print=None)
    return 0


def cmd_refresh(args):
    print_cache_status()
    result = asyncio.run(LeaderboardRefresher().run())
    return 0 if result.get("success") else 1


def cmd_trigger(args):
    url = f"{args.url.rstrip('/')}/leaderboard-refresh"
    print(f"Triggering refresh at {url}...")
    try:
        response = requests.post(url, json={}, timeout=args.timeout)
    except requests.RequestException as e:
        print(f"Trigger failed: {e}")
        return 1
    print(f"Status: {response.status_code} {response.text[:200]}")
    return 0 if response.ok else 1


def cmd_show(args):
    entries = db_cache.get_entries(args.type)
    ranked = leaderboard.rank_entries(entries)
    rows = leaderboard.search_entries(ranked, args.search)
    totals = leaderboard.summarize(entries)

    print(f"Total points: {totals['totalPoints']:,} ({totals['count']} seeds) | "
          f"Mythic: {totals['mythicPoints']:,} ({totals['mythicCount']}) | "
          f"Ancient: {totals['ancientPoints']:,} ({totals['ancientCount']})")
    search_rank = leaderboard.find_rank(ranked, args.search)
    if search_rank:
        print(f"Seed {args.search.strip()} is rank #{search_rank}")

    print(f"{'Rank':<6} {'Type':<8} {'Token':<10} {'Points':>10}  Listed")
    print("-" * 44)
    for rank, e in rows[:args.limit]:
        print(f"#{rank:<5} {e.nft_type.value:<8} {e.token_id:<10} {e.points:>10,}  {'yes' if e.is_listed else ''}")
    return 0


async def _load_listings(nft_type, sort_type):
    lookups = LookupCache()
    async with aiohttp.ClientSession() as session:
        listings = await load_listings(session, nft_type, lookups)
    print(f"Lookups: {lookups.hits} cache hits, {lookups.misses} misses")
    return sort_listings(listings, sort_type)


def cmd_listings(args):
    listings = asyncio.run(_load_listings(args.type, args.sort))
    print(f"{'Token':<10} {'Price':<18} {'Points':>10} {'Pts/ETH':>12}  URL")
    print("-" * 80)
    for l in listings[:args.limit]:
        print(f"{l.get('tokenId', '?'):<10} {format_price(l):<18} {l.get('stakingPoints', 0):>10,} "
              f"{points_per_price(l):>12,.0f}  {get_opensea_url(l) or ''}")
    return 0


def cmd_export(args):
    output_path = args.output.expanduser()
    output_path.parent.mkdir(parents=True, exist_ok=True)

    entries = db_cache.get_entries()
    ranked = leaderboard.rank_entries(entries)
    df = pd.DataFrame([{"rank": rank, **e.to_row()} for rank, e in ranked],
                      columns=["rank", "collection_slug", "nft_type", "token_id", "points",
                               "image_url", "opensea_url", "is_listed"])
    summary = pd.DataFrame([{"metric": k, "value": v} for k, v in leaderboard.summarize(entries).items()])

    with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
        summary.to_excel(writer, sheet_name="Summary", index=False)
        for nft_type in NFTType:
            typed = df[df["nft_type"] == nft_type.value].copy()
            typed["rank"] = range(1, len(typed) + 1)
            typed.to_excel(writer, sheet_name=nft_type.value, index=False)
        for ws in writer.book.worksheets:
            for cell in ws[1]:
                cell.font = Font(bold=True, color="FFFFFF")
                cell.fill = HEADER_FILL
            for col in range(1, ws.max_column + 1):
                ws.column_dimensions[get_column_letter(col)].width = 18

    print(f"Exported {len(entries)} entries to {output_path}")
    return 0


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Mythic/Ancient seed leaderboard")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP functions")
    serve.add_argument("--host", default=config.SERVER_HOST)
    serve.add_argument("--port", type=int, default=config.SERVER_PORT)
    serve.set_defaults(func=cmd_serve)

    refresh = sub.add_parser("refresh", help="Run the leaderboard refresh job once")
    refresh.set_defaults(func=cmd_refresh)

    trigger = sub.add_parser("trigger", help="Ask a running server to refresh")
    trigger.add_argument("--url", default=config.REMOTE_URL, help=f"Server base URL (default: {config.REMOTE_URL})")
    trigger.add_argument("--timeout", type=int, default=600)
    trigger.set_defaults(func=cmd_trigger)

    show = sub.add_parser("show", help="Print the cached leaderboard")
    show.add_argument("--type", choices=[t.value for t in NFTType], default=None)
    show.add_argument("--search", default="", help="Token id substring")
    show.add_argument("--limit", type=int, default=50)
    show.set_defaults(func=cmd_show)

    listings = sub.add_parser("listings", help="Print active listings with staking points")
    listings.add_argument("--type", choices=[t.value for t in NFTType], default=NFTType.MYTHIC.value)
    listings.add_argument("--sort", choices=SORT_TYPES, default="bestdeal")
    listings.add_argument("--limit", type=int, default=50)
    listings.set_defaults(func=cmd_listings)

    export = sub.add_parser("export", help="Write the cached leaderboard to XLSX")
    export.add_argument("--output", type=Path, default=DEFAULT_OUTPUT_FILE,
                        help=f"Output XLSX path (default: {DEFAULT_OUTPUT_FILE})")
    export.set_defaults(func=cmd_export)

    return parser.parse_args(argv)


def main(argv=None):
    if hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(line_buffering=True)
    args = parse_args(argv)
    return args.func(args)
