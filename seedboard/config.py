"""Environment and tunables for the seed leaderboard."""
import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env from project root (parent of seedboard/)
ROOT_DIR = Path(__file__).resolve().parent.parent
load_dotenv(ROOT_DIR / ".env")

SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY") or os.getenv("SUPABASE_KEY")

OPENSEA_API_BASE = os.getenv("OPENSEA_API_BASE", "https://api.opensea.io/api/v2")
OPENSEA_API_KEY = os.getenv("OPENSEA_API_KEY", "")
STAKING_API_BASE = os.getenv("STAKING_API_BASE", "https://staking.youmio.ai/api")

SERVER_HOST = os.getenv("SEEDBOARD_HOST", "0.0.0.0")
SERVER_PORT = int(os.getenv("SEEDBOARD_PORT", "8080"))
REMOTE_URL = os.getenv("SEEDBOARD_URL", f"http://localhost:{SERVER_PORT}")

# Order matters: the refresh job walks collections in this order
COLLECTION_SLUGS = {
    "Mythic": "mythicseed",
    "Ancient": "ancientseed",
}

NFT_PAGE_SIZE = 200
NFT_MAX_PAGES = 50
LISTING_MAX_PAGES = 20
POINTS_CHUNK_SIZE = 10
UPSERT_BATCH_SIZE = 100
IMAGE_TIMEOUT = 8
LOOKUP_TTL = int(os.getenv("SEEDBOARD_LOOKUP_TTL", "600"))

CACHE_KEY = "leaderboard_v1"
ENTRIES_TABLE = "leaderboard_entries"
META_TABLE = "leaderboard_meta"
